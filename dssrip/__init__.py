"""Rip full-resolution images from the Dead Sea Scrolls digital library."""

from .errors import CompositionError, InvalidInput, NotFound, RipError, TileFetchError, UpstreamError
from .ids import ItemId, resolve
from .manifest import ImageManifest, fetch_manifest
from .rip import download_image, rip, save_image

__version__ = '0.2.1'
