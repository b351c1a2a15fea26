import threading
import time
from io import BytesIO

import pytest
from PIL import Image

from dssrip.grid import tile_extent
from dssrip.ids import ItemId
from dssrip.manifest import parse_manifest


def tile_color(coord):
    return (coord.row * 40 % 256, coord.col * 40 % 256, 128)


def encode(size, color=(0, 0, 0), fmt='PNG', mode='RGB'):
    buf = BytesIO()
    Image.new(mode, size, color if mode == 'RGB' else 0).save(buf, format=fmt)
    return buf.getvalue()


class FakeClient:
    """In-memory archive: tiles are solid colours keyed by coordinate."""

    def __init__(self, raw, delay=0.0, broken=(), wrong_size=()):
        self.raw = raw
        self.delay = delay
        self.broken = set(broken)
        self.wrong_size = set(wrong_size)
        self.requested = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fetch_manifest(self, item_id):
        return dict(self.raw)

    def fetch_tile(self, manifest, coord):
        with self._lock:
            self.requested.append(coord)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if coord in self.broken:
                raise OSError(f"connection reset on {coord}")
            w, h = tile_extent(manifest, coord)
            if coord in self.wrong_size:
                w += 1
            return encode((w, h), tile_color(coord))
        finally:
            with self._lock:
                self.in_flight -= 1


def raw_manifest(width=1000, height=800, tile_size=512, **extra):
    raw = {'width': width, 'height': height, 'tile_size': tile_size,
           'base_url': 'https://lh3.ggpht.com/abc', 'zoom': 4, 'title': 'Plate 1'}
    raw.update(extra)
    return raw


@pytest.fixture
def manifest():
    return parse_manifest(ItemId('B-314643'), raw_manifest())


@pytest.fixture
def client():
    return FakeClient(raw_manifest())
