# web_app.py
import os
import tempfile
import time
import uuid
from pathlib import Path

from nicegui import app, ui

from dssrip import RipError, download_image

# ──────────────────────────────────────────────────────────────────────────────
# Shared download folder; UUID file names keep concurrent users apart
# ──────────────────────────────────────────────────────────────────────────────
TMP_DIR = Path(tempfile.gettempdir()) / 'dssrip_dl'
MAX_AGE = 3600


def rip_to_tmp(text: str) -> str:
    """Rip into TMP_DIR and return the public /downloads path."""
    TMP_DIR.mkdir(exist_ok=True)
    filename = f'dssrip_{uuid.uuid4().hex}.png'
    saved = download_image(text, out=str(TMP_DIR / filename))
    if not Path(saved).exists():
        raise RuntimeError('file was not written')
    return f'/downloads/{filename}'


def cleanup_old_files(max_age: float = MAX_AGE) -> int:
    cutoff = time.time() - max_age
    removed = 0
    for p in TMP_DIR.glob('dssrip_*.png'):
        if p.stat().st_mtime < cutoff:
            p.unlink(missing_ok=True)
            removed += 1
    return removed


# ──────────────────────────────────────────────────────────────────────────────
# UI
# ──────────────────────────────────────────────────────────────────────────────
def build_ui():
    TMP_DIR.mkdir(exist_ok=True)
    app.add_static_files('/downloads', str(TMP_DIR))

    with ui.card():
        ui.label('Item page URL or id (e.g. B-314643)')
        url_input = ui.input('URL / id').style('width: 80vw;').props('clearable')
        links_area = ui.column().classes('gap-2 mt-2')

        def on_download():
            text = (url_input.value or '').strip()
            if not text:
                ui.notify('Enter an item URL or id', type='warning')
                return
            try:
                public_url = rip_to_tmp(text)
            except RipError as e:
                ui.notify(f'{e.stage} failed: {e}', type='negative')
                return
            ui.notify('Done', type='positive')
            with links_area:
                with ui.row().classes('items-center gap-2'):
                    ui.label('Download URL:')
                    ui.link(public_url, public_url, new_tab=True)

        ui.button('Rip full-resolution image', on_click=on_download, color='primary')

    ui.timer(1800, cleanup_old_files)


if __name__ in {"__main__", "__mp_main__"}:
    build_ui()
    ui.run(host='0.0.0.0', port=int(os.getenv('PORT', '80')))
