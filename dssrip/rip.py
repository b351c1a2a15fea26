import logging
import os
from typing import Optional, Tuple

from PIL import Image

from .archive import ArchiveClient
from .compositor import compose
from .config import Settings
from .downloader import iter_tiles
from .errors import InvalidInput
from .grid import plan_grid
from .ids import ItemId, resolve
from .manifest import ImageManifest, fetch_manifest

log = logging.getLogger(__name__)

SAVE_OPTIONS = {'JPEG': {'quality': 95}}


def output_format(path: str) -> str:
    """Pillow format name for the extension of ``path``."""
    ext = os.path.splitext(path)[1].lower()
    fmt = Image.registered_extensions().get(ext)
    if not ext or fmt is None or fmt not in Image.SAVE:
        raise InvalidInput(f"Unsupported output extension: {ext or '(none)'}")
    return fmt


def default_output(item_id: ItemId) -> str:
    return f"{item_id}.png"


def rip(text: str, client=None, settings: Optional[Settings] = None) -> Tuple[ImageManifest, Image.Image]:
    """Resolve, fetch and composite one archive image. Returns (manifest, canvas)."""
    item_id = resolve(text)
    settings = settings or Settings.from_env()
    client = client or ArchiveClient(settings=settings)
    manifest = fetch_manifest(client, item_id)
    coords = plan_grid(manifest)
    log.info('fetching %d tiles with %d workers', len(coords), settings.workers)
    canvas = compose(manifest, iter_tiles(client, manifest, coords, settings.workers))
    return manifest, canvas


def save_image(image: Image.Image, path: str) -> str:
    """Encode to a temporary sibling, then move it into place."""
    fmt = output_format(path)
    tmp = f"{path}.part"
    try:
        image.save(tmp, format=fmt, **SAVE_OPTIONS.get(fmt, {}))
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    return path


def download_image(text: str, out: Optional[str] = None, client=None,
                   settings: Optional[Settings] = None) -> str:
    """Rip one image and save it; return the absolute path written."""
    if out is not None:
        output_format(out)
    manifest, canvas = rip(text, client=client, settings=settings)
    out = os.path.abspath(out or default_output(manifest.item_id))
    save_image(canvas, out)
    log.info('saved %s', out)
    return out
