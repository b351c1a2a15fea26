"""Pastes tiles into one canvas. Each tile owns the disjoint rectangle starting
at (col * tile_size, row * tile_size), so tiles may arrive in any order."""

import logging
from typing import Iterable

from PIL import Image

from .errors import CompositionError
from .grid import grid_shape, plan_grid, tile_extent, tile_origin

log = logging.getLogger(__name__)

CANVAS_MODE = 'RGB'


def new_canvas(manifest) -> Image.Image:
    return Image.new(CANVAS_MODE, (manifest.width, manifest.height))


def paste_tile(canvas: Image.Image, manifest, tile) -> None:
    coord = tile.coordinate
    rows, cols = grid_shape(manifest)
    if not (0 <= coord.row < rows and 0 <= coord.col < cols):
        raise CompositionError(f"tile {tuple(coord)} is outside the {rows}x{cols} grid")
    x, y = tile_origin(manifest, coord)
    size = tile.image.size
    if size != (tile.width, tile.height) or size != tile_extent(manifest, coord):
        raise CompositionError(f"tile {tuple(coord)} is {size[0]}x{size[1]}, "
                               f"expected {tile_extent(manifest, coord)}")
    if x + size[0] > canvas.width or y + size[1] > canvas.height:
        raise CompositionError(f"tile {tuple(coord)} overflows the canvas")
    if tile.image.mode != canvas.mode:
        raise CompositionError(f"tile {tuple(coord)} has mode {tile.image.mode}, canvas is {canvas.mode}")
    canvas.paste(tile.image, (x, y))


def compose(manifest, tiles: Iterable) -> Image.Image:
    """Build the full image from a complete tile set, in any order."""
    canvas = new_canvas(manifest)
    expected = set(plan_grid(manifest))
    seen = set()
    for tile in tiles:
        if tile.coordinate in seen:
            raise CompositionError(f"tile {tuple(tile.coordinate)} delivered twice")
        paste_tile(canvas, manifest, tile)
        seen.add(tile.coordinate)
        tile.image.close()
    missing = expected - seen
    if missing:
        raise CompositionError(f"{len(missing)} tiles missing, e.g. {tuple(min(missing))}")
    log.info('composed %dx%d canvas from %d tiles', canvas.width, canvas.height, len(seen))
    return canvas
