import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Iterator, List

import requests
from PIL import Image

from .errors import TileFetchError
from .grid import TileCoordinate, tile_extent

log = logging.getLogger(__name__)

DEFAULT_WORKERS = 16


@dataclass
class TileImage:
    coordinate: TileCoordinate
    width: int
    height: int
    image: Image.Image


def fetch_tile_image(client, manifest, coord: TileCoordinate) -> TileImage:
    """Fetch and decode one tile, checking it has the planned extent."""
    expected = tile_extent(manifest, coord)
    try:
        data = client.fetch_tile(manifest, coord)
        with Image.open(BytesIO(data)) as img:
            image = img.convert('RGB')
    except (requests.RequestException, OSError, ValueError, Image.DecompressionBombError) as e:
        raise TileFetchError(coord, e) from e
    if image.size != expected:
        got = image.size
        image.close()
        raise TileFetchError(coord, f"decoded size {got[0]}x{got[1]}, expected {expected[0]}x{expected[1]}")
    log.debug('fetched tile (%d,%d) %dx%d', coord.row, coord.col, *expected)
    return TileImage(coord, expected[0], expected[1], image)


def iter_tiles(client, manifest, coords: Iterable[TileCoordinate],
               workers: int = DEFAULT_WORKERS) -> Iterator[TileImage]:
    """Yield decoded tiles in completion order, at most ``workers`` requests in flight.

    The first failure cancels every queued fetch, waits for the running ones and
    raises TileFetchError; nothing is yielded after it.
    """
    coords = list(coords)
    if len(set(coords)) != len(coords):
        raise ValueError("duplicate tile coordinates")
    ex = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='tile')
    try:
        futures = [ex.submit(fetch_tile_image, client, manifest, c) for c in coords]
        for fut in as_completed(futures):
            yield fut.result()
    finally:
        ex.shutdown(wait=True, cancel_futures=True)


def download_tiles(client, manifest, coords: Iterable[TileCoordinate],
                   workers: int = DEFAULT_WORKERS) -> List[TileImage]:
    tiles = list(iter_tiles(client, manifest, coords, workers))
    log.info('downloaded %d tiles', len(tiles))
    return tiles
