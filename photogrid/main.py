# main.py
"""
Entry point and main application window for PhotoGrid.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QStandardPaths, QThreadPool
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from utils.image_loader import ImageDecodeError, PhotoLoader
from utils.validation import validate_output_path

from . import config
from .controllers import CollageSession
from .render import ExportRenderer, export_filename
from .templates import TEMPLATES, template_ids
from .widgets.stage import CollageStage
from .workers import Worker

LOGGER_NAME = "photogrid"


def configure_logging() -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when the module
    is imported multiple times (e.g., in tests). A rotating file handler limits
    on-disk log growth while mirroring output to stdout.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = Path(__file__).resolve().parents[1] / config.LOG_FILENAME
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


logger = configure_logging()


def global_exception_handler(exc_type, value, tb):
    logger.error("Uncaught exception", exc_info=(exc_type, value, tb))
    sys.__excepthook__(exc_type, value, tb)


class MainWindow(QMainWindow):
    def __init__(self, session: Optional[CollageSession] = None, loader: Optional[PhotoLoader] = None):
        super().__init__()
        self.setWindowTitle("PhotoGrid")
        self.resize(760, 820)

        self.session = session or CollageSession()
        self.loader = loader or PhotoLoader()

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(8, 6, 8, 6)
        main_layout.setSpacing(8)

        main_layout.addLayout(self._build_toolbar())

        self.stage = CollageStage(self.session)
        self.stage.changed.connect(self._sync_controls)
        main_layout.addWidget(self.stage, 1)

        self.statusBar().showMessage("Ready.")
        self._sync_controls()
        logger.info("MainWindow initialized.")

    def _build_toolbar(self) -> QHBoxLayout:
        bar = QHBoxLayout()
        bar.setSpacing(6)

        bar.addWidget(QLabel("Template:"))
        self.template_combo = QComboBox()
        self.template_combo.setAccessibleName("Template")
        for template_id in template_ids():
            self.template_combo.addItem(TEMPLATES[template_id].label, userData=template_id)
        self.template_combo.setCurrentIndex(template_ids().index(self.session.template.id))
        self.template_combo.currentIndexChanged.connect(self._on_template_changed)
        bar.addWidget(self.template_combo)

        self.load_btn = QPushButton("Load Photos…")
        self.load_btn.clicked.connect(self._choose_photos)
        bar.addWidget(self.load_btn)

        self.swap_btn = QPushButton("Swap")
        self.swap_btn.setCheckable(True)
        self.swap_btn.setToolTip("Tap two cells to exchange their photos")
        self.swap_btn.toggled.connect(self._on_swap_toggled)
        bar.addWidget(self.swap_btn)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.clicked.connect(self._reset)
        bar.addWidget(self.reset_btn)

        bar.addStretch(1)

        self.export_btn = QPushButton("Export PNG…")
        self.export_btn.clicked.connect(self._export)
        bar.addWidget(self.export_btn)
        return bar

    def _sync_controls(self) -> None:
        has_photos = self.session.has_occupied_cells
        self.export_btn.setEnabled(has_photos)
        self.reset_btn.setEnabled(bool(self.session.photos))
        self.swap_btn.setEnabled(bool(self.session.photos))
        if self.swap_btn.isChecked() != self.session.swap_mode:
            self.swap_btn.blockSignals(True)
            self.swap_btn.setChecked(self.session.swap_mode)
            self.swap_btn.blockSignals(False)

    def _refresh(self) -> None:
        self.stage.refresh()
        self._sync_controls()

    # ------------------------------------------------------------------
    # Template / swap / reset
    # ------------------------------------------------------------------
    def _on_template_changed(self, _index: int) -> None:
        template_id = self.template_combo.currentData()
        self.session.set_template(template_id)
        self._refresh()

    def _on_swap_toggled(self, checked: bool) -> None:
        self.session.set_swap_mode(checked)
        self.statusBar().showMessage(
            "Swap mode: tap two cells to exchange photos." if checked else "Ready."
        )
        self._refresh()

    def _reset(self) -> None:
        self.session.reset()
        self.statusBar().showMessage("Collage reset.")
        self._refresh()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _choose_photos(self) -> None:
        pictures_dir = (
            QStandardPaths.writableLocation(QStandardPaths.PicturesLocation) or ""
        )
        patterns = " ".join(f"*.{fmt}" for fmt in config.SUPPORTED_IMAGE_FORMATS)
        paths, _ = QFileDialog.getOpenFileNames(
            self, "Choose Photos", pictures_dir, f"Images ({patterns})"
        )
        if paths:
            self.load_photos(paths)

    def load_photos(self, paths: List[str]) -> None:
        """Decode ``paths`` in the background and install them if all succeed."""
        token = self.session.begin_load()
        self.statusBar().showMessage("Loading photos…")
        worker = Worker(
            self._decode_batch,
            token,
            list(paths),
            on_result=self._on_photos_loaded,
            on_error=self._on_load_failed,
        )
        QThreadPool.globalInstance().start(worker)

    def _decode_batch(self, token: int, paths: List[str]):
        # Runs on the thread pool; the token travels with the result or error.
        try:
            return token, self.loader.decode_batch(paths)
        except ImageDecodeError as e:
            e.token = token
            raise

    def _on_photos_loaded(self, result) -> None:
        token, photos = result
        if not self.session.replace_photos(photos, token=token):
            return
        self.statusBar().showMessage(f"{len(photos)} photo(s) loaded.")
        self._refresh()

    def _on_load_failed(self, error: BaseException) -> None:
        if isinstance(error, ImageDecodeError):
            if error.token is not None and not self.session.is_current_load(error.token):
                logger.info("Ignoring failure of stale load batch %d: %s", error.token, error)
                return
            logger.warning("Photo batch rejected: %s", error)
        else:
            logger.error("Unexpected error while loading photos: %s", error)
        self.statusBar().showMessage(f"Could not load photos: {error}")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def _select_save_path(self) -> Optional[str]:
        pictures_dir = (
            QStandardPaths.writableLocation(QStandardPaths.PicturesLocation) or ""
        )
        default = str(Path(pictures_dir) / export_filename()) if pictures_dir else export_filename()
        path, _ = QFileDialog.getSaveFileName(self, "Export Collage", default, "PNG (*.png)")
        if not path:
            return None
        try:
            validated = validate_output_path(path, {f".{config.EXPORT_FORMAT}"})
        except ValueError as exc:
            QMessageBox.warning(self, "Invalid save location", f"Cannot save collage: {exc}")
            return None
        return str(validated)

    def _export(self) -> None:
        if not self.session.has_occupied_cells:
            self.statusBar().showMessage("Pick some photos first.")
            return
        path = self._select_save_path()
        if not path:
            return
        self.export_to(path)

    def export_to(self, path: str) -> None:
        """Render on the GUI thread, write the file on a worker."""
        renderer = ExportRenderer(preview_stage=self.stage.stage_size())
        image = renderer.render(self.session)
        self.statusBar().showMessage("Saving collage…")
        worker = Worker(
            renderer.save,
            image,
            path,
            on_result=self._on_saved,
            on_error=self._on_save_failed,
        )
        QThreadPool.globalInstance().start(worker)

    def _on_saved(self, saved_path: Path) -> None:
        self.statusBar().showMessage(f"Saved: {saved_path}")

    def _on_save_failed(self, error: BaseException) -> None:
        logger.error("Export failed: %s", error)
        QMessageBox.critical(self, "Error", f"Could not save collage: {error}")
        self.statusBar().showMessage("Export failed.")

    def closeEvent(self, event):
        self.loader.shutdown()
        super().closeEvent(event)


def main() -> int:
    sys.excepthook = global_exception_handler
    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyle("Fusion")
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
