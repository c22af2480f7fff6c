import os
from pathlib import Path

import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip(
    "PySide6.QtWidgets",
    reason="PySide6 Qt bindings required for MainWindow tests",
    exc_type=ImportError,
)

from PySide6.QtCore import QPointF, QThreadPool  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

import photogrid.main as main_module  # noqa: E402
from utils.image_loader import ImageDecodeError, Photo  # noqa: E402


@pytest.fixture(scope="module")
def qt_app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture()
def window(qt_app):
    win = main_module.MainWindow()
    win.stage.resize(400, 400)
    yield win
    win.close()


def _photos(count: int):
    return [
        Photo(image=Image.new("RGB", (60, 40), color=(0, 40 * i, 0)), source=Path(f"p{i}.png"))
        for i in range(count)
    ]


def _load(window, count: int) -> None:
    token = window.session.begin_load()
    window._on_photos_loaded((token, _photos(count)))


def test_export_disabled_until_photos_loaded(window):
    assert not window.export_btn.isEnabled()
    _load(window, 3)
    assert window.export_btn.isEnabled()
    assert window.statusBar().currentMessage() == "3 photo(s) loaded."


def test_stale_load_result_is_ignored(window):
    stale = window.session.begin_load()
    _load(window, 2)
    window._on_photos_loaded((stale, _photos(4)))
    assert len(window.session.photos) == 2


def test_stale_load_failure_is_ignored(window):
    stale = window.session.begin_load()
    _load(window, 4)
    window._on_load_failed(ImageDecodeError("bad.png", "not a valid image", token=stale))
    assert len(window.session.photos) == 4
    assert window.statusBar().currentMessage() == "4 photo(s) loaded."


def test_decode_failure_carries_batch_token(window, tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not a png")
    token = window.session.begin_load()
    with pytest.raises(ImageDecodeError) as info:
        window._decode_batch(token, [str(bad)])
    assert info.value.token == token


def test_decode_failure_keeps_previous_photos(window):
    _load(window, 2)
    window._on_load_failed(ImageDecodeError("bad.png", "not a valid image"))
    assert len(window.session.photos) == 2
    assert window.statusBar().currentMessage().startswith("Could not load photos")


def test_template_combo_switches_session_template(window):
    _load(window, 5)
    index = window.template_combo.findData("2v")
    window.template_combo.setCurrentIndex(index)
    assert window.session.template.id == "2v"
    assert [c.photo_index for c in window.session.cells] == [0, 1]


def test_swap_button_drives_swap_mode(window):
    _load(window, 4)
    window.swap_btn.setChecked(True)
    assert window.session.swap_mode is True
    window.swap_btn.setChecked(False)
    assert window.session.swap_mode is False


def test_stage_hit_test_and_mouse_pan(window):
    _load(window, 4)
    stage = window.stage
    assert stage.cell_at(QPointF(100, 100)) == 0
    assert stage.cell_at(QPointF(300, 300)) == 3
    assert stage.cell_at(QPointF(2, 2)) is None

    stage._press("mouse", QPointF(100, 100))
    stage._move("mouse", QPointF(120, 90))
    stage._release("mouse")
    cell = window.session.cells[0]
    assert (cell.tx, cell.ty) == (20, -10)


def test_stage_taps_swap_cells_in_swap_mode(window):
    _load(window, 4)
    window.swap_btn.setChecked(True)
    window.stage._press("mouse", QPointF(100, 100))
    window.stage._release("mouse")
    window.stage._press("mouse", QPointF(300, 100))
    window.stage._release("mouse")
    assert [c.photo_index for c in window.session.cells] == [1, 0, 2, 3]


def test_stage_paints_without_error(window):
    _load(window, 2)
    window.session.set_swap_mode(True)
    window.session.tap_cell(0)
    image = window.stage.grab()
    assert not image.isNull()


def test_export_writes_png(window, tmp_path, qt_app):
    _load(window, 4)
    target = tmp_path / "collage.png"
    window.export_to(str(target))
    QThreadPool.globalInstance().waitForDone()
    qt_app.processEvents()
    assert target.exists()
    with Image.open(target) as exported:
        assert exported.size == (main_module.config.EXPORT_SIZE,) * 2
