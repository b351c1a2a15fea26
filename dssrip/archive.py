"""Dead Sea Scrolls digital library transport.

An item page embeds an ``<image-viewer url="...">`` whose url is the image base.
Tiles live at ``<base>=x<col>-y<row>-z<zoom>``. The service publishes no
geometry, so zoom levels, columns and rows are found by HEAD probing: the first
index answered with a 4xx status is one past the last valid one.
"""

import html
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

import requests
from PIL import Image

from .config import Settings
from .errors import NotFound, UpstreamError
from .grid import TileCoordinate
from .http import http_head, http_ok, new_session
from .ids import ItemId

log = logging.getLogger(__name__)

_BASE_RE = re.compile(r'<image-viewer[\s\S]+?url="(?P<url>https[^"]+)"')
_TITLE_RE = re.compile(r'<title>\s*[^-<]+-\s*(?P<title>[^<]+?)\s*</title>')

MAX_PROBE = 1000


@dataclass(frozen=True)
class ItemPage:
    base_url: str
    title: Optional[str] = None


def parse_page(text: str) -> ItemPage:
    m = _BASE_RE.search(text)
    if not m:
        raise UpstreamError("failed to find the image base URL in the item page")
    t = _TITLE_RE.search(text)
    return ItemPage(
        base_url=html.unescape(m.group('url')),
        title=html.unescape(t.group('title')) if t else None,
    )


def tile_url(base_url: str, zoom: int, coord: TileCoordinate) -> str:
    return f"{base_url}=x{coord.col}-y{coord.row}-z{zoom}"


def _decoded_size(data: bytes) -> Tuple[int, int]:
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (OSError, Image.DecompressionBombError) as e:
        raise UpstreamError(f"cannot decode probe tile: {e}") from e


class ArchiveClient:
    def __init__(self, session: Optional[requests.Session] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self.session = session or new_session(self.settings)

    # ──────────────────────────────────────────────────────────────────────
    # Item page
    # ──────────────────────────────────────────────────────────────────────

    def fetch_page(self, item_id: ItemId) -> ItemPage:
        try:
            r = http_ok(self.session, item_id.page_url, self.settings)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code in (404, 410):
                raise NotFound(f"archive has no item {item_id}") from e
            raise
        return parse_page(r.text)

    # ──────────────────────────────────────────────────────────────────────
    # Geometry probing
    # ──────────────────────────────────────────────────────────────────────

    def _exists(self, url: str) -> bool:
        r = http_head(self.session, url, self.settings)
        if r.ok:
            return True
        if 400 <= r.status_code < 500:
            return False
        raise requests.HTTPError(f"{r.status_code} for {url}", response=r)

    def probe_limit(self, template: str) -> int:
        """Largest n >= 0 such that ``template + str(n)`` exists (0 is assumed to)."""
        batch = self.settings.probe_workers
        start = 1
        with ThreadPoolExecutor(max_workers=batch) as ex:
            while start <= MAX_PROBE:
                levels = range(start, start + batch)
                found = list(ex.map(self._exists, [f"{template}{n}" for n in levels]))
                for n, ok in zip(levels, found):
                    if not ok:
                        return n - 1
                start += batch
        raise UpstreamError(f"no probe limit found below {MAX_PROBE} for {template}")

    def determine_max_zoom(self, base_url: str) -> int:
        return self.probe_limit(f"{base_url}=x0-y0-z")

    def determine_columns(self, base_url: str, zoom: int) -> int:
        return self.probe_limit(f"{base_url}=z{zoom}-y0-x") + 1

    def determine_rows(self, base_url: str, zoom: int) -> int:
        return self.probe_limit(f"{base_url}=z{zoom}-x0-y") + 1

    def determine_dimensions(self, base_url: str, zoom: int) -> Tuple[int, int]:
        """Return (columns, rows), probing both axes at once."""
        with ThreadPoolExecutor(max_workers=2) as ex:
            cols = ex.submit(self.determine_columns, base_url, zoom)
            rows = ex.submit(self.determine_rows, base_url, zoom)
            return cols.result(), rows.result()

    # ──────────────────────────────────────────────────────────────────────
    # Logical operations used by the engine
    # ──────────────────────────────────────────────────────────────────────

    def fetch_manifest(self, item_id: ItemId) -> dict:
        page = self.fetch_page(item_id)
        log.info('item %s: base %s', item_id, page.base_url)
        zoom = self.determine_max_zoom(page.base_url)
        cols, rows = self.determine_dimensions(page.base_url, zoom)
        log.info('item %s: zoom %d, %d columns x %d rows', item_id, zoom, cols, rows)

        first_w, first_h = _decoded_size(self._get_tile(page.base_url, zoom, TileCoordinate(0, 0)))
        last_w, last_h = _decoded_size(
            self._get_tile(page.base_url, zoom, TileCoordinate(rows - 1, cols - 1)))

        if cols > 1 and rows > 1 and first_w != first_h:
            raise UpstreamError(f"tiles are not square: {first_w}x{first_h}")
        if cols > 1:
            tile_size = first_w
        elif rows > 1:
            tile_size = first_h
        else:
            tile_size = max(first_w, first_h)

        return {
            'width': (cols - 1) * tile_size + last_w,
            'height': (rows - 1) * tile_size + last_h,
            'tile_size': tile_size,
            'base_url': page.base_url,
            'zoom': zoom,
            'title': page.title,
        }

    def _get_tile(self, base_url: str, zoom: int, coord: TileCoordinate) -> bytes:
        return http_ok(self.session, tile_url(base_url, zoom, coord), self.settings).content

    def fetch_tile(self, manifest, coord: TileCoordinate) -> bytes:
        return self._get_tile(manifest.base_url, manifest.zoom, coord)
