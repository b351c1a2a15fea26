import os
import time
from unittest.mock import patch

import pytest

web_app = pytest.importorskip('web_app')


class TestWebApp:
    """Download helpers behind the web page"""

    def test_rip_to_tmp(self, tmp_path):
        def fake_download(text, out):
            open(out, 'wb').close()
            return out

        with patch.object(web_app, 'TMP_DIR', tmp_path), \
                patch.object(web_app, 'download_image', side_effect=fake_download):
            url = web_app.rip_to_tmp('B-314643')
        assert url.startswith('/downloads/dssrip_') and url.endswith('.png')
        assert (tmp_path / url.rsplit('/', 1)[1]).exists()

    def test_cleanup_old_files(self, tmp_path):
        old = tmp_path / 'dssrip_old.png'
        new = tmp_path / 'dssrip_new.png'
        old.touch()
        new.touch()
        past = time.time() - 7200
        os.utime(old, (past, past))
        with patch.object(web_app, 'TMP_DIR', tmp_path):
            assert web_app.cleanup_old_files() == 1
        assert not old.exists() and new.exists()
