import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .errors import NotFound, RipError, UpstreamError
from .ids import ItemId

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageManifest:
    """Geometry of one archive image plus what the transport needs to address its tiles."""
    item_id: ItemId
    width: int
    height: int
    tile_size: int
    base_url: str
    zoom: int
    title: Optional[str] = None


def _int_field(raw: dict, key: str, minimum: int = 1) -> int:
    if key not in raw or raw[key] is None:
        raise UpstreamError(f"manifest is missing {key!r}")
    value = raw[key]
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise UpstreamError(f"manifest {key!r} is not an integer: {value!r}")
    if value < minimum:
        raise UpstreamError(f"manifest {key!r} must be >= {minimum}, got {value}")
    return value


def parse_manifest(item_id: ItemId, raw) -> ImageManifest:
    if not isinstance(raw, dict):
        raise UpstreamError(f"manifest is not a mapping: {type(raw).__name__}")
    base_url = raw.get('base_url')
    if not isinstance(base_url, str) or not base_url:
        raise UpstreamError("manifest is missing 'base_url'")
    title = raw.get('title')
    return ImageManifest(
        item_id=item_id,
        width=_int_field(raw, 'width'),
        height=_int_field(raw, 'height'),
        tile_size=_int_field(raw, 'tile_size'),
        base_url=base_url,
        zoom=_int_field(raw, 'zoom', minimum=0),
        title=title if isinstance(title, str) and title else None,
    )


def fetch_manifest(client, item_id: ItemId) -> ImageManifest:
    """Ask the archive for the image geometry of ``item_id``.

    NotFound from the client passes through; any other failure becomes
    UpstreamError. No retries happen here.
    """
    try:
        raw = client.fetch_manifest(item_id)
    except (NotFound, UpstreamError):
        raise
    except (requests.RequestException, RipError, OSError, ValueError) as e:
        raise UpstreamError(f"manifest request for {item_id} failed: {e}") from e
    manifest = parse_manifest(item_id, raw)
    log.info('manifest %s: %dx%d, tile %d, zoom %d',
             item_id, manifest.width, manifest.height, manifest.tile_size, manifest.zoom)
    return manifest
