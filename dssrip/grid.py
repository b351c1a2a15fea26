"""Tile grid geometry. Tiles on the last row/column may be smaller than the
nominal tile size; their extent is clipped by the image border."""

import math
from typing import List, NamedTuple, Tuple


class TileCoordinate(NamedTuple):
    row: int
    col: int


def grid_shape(manifest) -> Tuple[int, int]:
    """Return (rows, cols)."""
    ts = manifest.tile_size
    return math.ceil(manifest.height / ts), math.ceil(manifest.width / ts)


def plan_grid(manifest) -> List[TileCoordinate]:
    rows, cols = grid_shape(manifest)
    return [TileCoordinate(row, col) for row in range(rows) for col in range(cols)]


def tile_origin(manifest, coord: TileCoordinate) -> Tuple[int, int]:
    """Top-left pixel (x, y) of a tile on the canvas."""
    return coord.col * manifest.tile_size, coord.row * manifest.tile_size


def tile_extent(manifest, coord: TileCoordinate) -> Tuple[int, int]:
    """Expected (width, height) of a tile in pixels."""
    x, y = tile_origin(manifest, coord)
    ts = manifest.tile_size
    return min(ts, manifest.width - x), min(ts, manifest.height - y)
