import os

import pytest
from PIL import Image

from dssrip.config import Settings
from dssrip.errors import InvalidInput, TileFetchError, UpstreamError
from dssrip.grid import TileCoordinate
from dssrip.rip import download_image, output_format, rip
from tests.conftest import FakeClient, raw_manifest, tile_color

SETTINGS = Settings(workers=4)


class TestRip:
    """End-to-end pipeline against an in-memory archive"""

    def test_rip(self):
        manifest, canvas = rip('B-314643', client=FakeClient(raw_manifest()), settings=SETTINGS)
        assert str(manifest.item_id) == 'B-314643'
        assert canvas.size == (1000, 800)

    def test_invalid_input_makes_no_requests(self):
        client = FakeClient(raw_manifest())
        with pytest.raises(InvalidInput):
            rip('not an id', client=client, settings=SETTINGS)
        assert client.requested == []

    def test_bad_manifest_makes_no_tile_requests(self):
        client = FakeClient(raw_manifest(width=0))
        with pytest.raises(UpstreamError):
            rip('B-1', client=client, settings=SETTINGS)
        assert client.requested == []


class TestDownloadImage:
    """Saving the composited image"""

    @pytest.mark.parametrize('name,fmt', [('out.png', 'PNG'), ('out.jpg', 'JPEG'), ('out.jpeg', 'JPEG')])
    def test_formats(self, tmp_path, name, fmt):
        out = download_image('B-314643', str(tmp_path / name),
                             client=FakeClient(raw_manifest()), settings=SETTINGS)
        assert out == str(tmp_path / name)
        with Image.open(out) as img:
            assert img.format == fmt
            assert img.size == (1000, 800)
        assert not os.path.exists(out + '.part')

    def test_png_is_lossless(self, tmp_path):
        out = download_image('B-314643', str(tmp_path / 'x.png'),
                             client=FakeClient(raw_manifest()), settings=SETTINGS)
        with Image.open(out) as img:
            assert img.getpixel((999, 799)) == tile_color(TileCoordinate(1, 1))

    def test_default_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        out = download_image('B-314643', client=FakeClient(raw_manifest()), settings=SETTINGS)
        assert out == str(tmp_path / 'B-314643.png')

    def test_tile_failure_writes_nothing(self, tmp_path):
        client = FakeClient(raw_manifest(), broken=[TileCoordinate(1, 0)])
        with pytest.raises(TileFetchError):
            download_image('B-314643', str(tmp_path / 'x.png'), client=client, settings=SETTINGS)
        assert list(tmp_path.iterdir()) == []

    def test_unknown_extension_rejected_before_network(self, tmp_path):
        client = FakeClient(raw_manifest())
        with pytest.raises(InvalidInput):
            download_image('B-314643', str(tmp_path / 'x.nope'), client=client, settings=SETTINGS)
        assert client.requested == []


class TestOutputFormat:
    def test_known(self):
        assert output_format('a/b.PNG') == 'PNG'
        assert output_format('b.jpg') == 'JPEG'

    @pytest.mark.parametrize('path', ['noext', 'x.nope'])
    def test_unknown(self, path):
        with pytest.raises(InvalidInput):
            output_format(path)
