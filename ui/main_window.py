from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QFormLayout,
    QLabel, QListWidget, QPushButton, QComboBox, QLineEdit, QSpinBox,
    QDoubleSpinBox, QFileDialog, QMessageBox, QApplication, QDialog,
)

from fluxforge.backend import ConverterBackend
from fluxforge.config import ConfigStore
from fluxforge.errors import FluxForgeError, PersistError
from fluxforge.models import ConvertResult, JobKind, PageMode, ToolOptions, VideoInfo
from fluxforge.session import ToolSession
from fluxforge.tools import (
    ARCHIVE_FORMATS, DPI_PRESETS, IMAGE_FORMATS, JOB_TOOLS, TOOL_PROFILES, ToolKind,
)
from ui.dialogs import SettingsDialog
from ui.theme import apply_theme


class _FileList(QListWidget):
    """Queue view that accepts files dropped from the desktop."""

    def __init__(self, on_drop, parent=None):
        super().__init__(parent)
        self._on_drop = on_drop
        self.setAcceptDrops(True)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        paths = [u.toLocalFile() for u in event.mimeData().urls() if u.isLocalFile()]
        self._on_drop(paths)
        event.acceptProposedAction()


# ── Main Window ───────────────────────────────────────────────────────────────

class MainWindow(QMainWindow):
    """Top-level application window: one tool session at a time."""

    def __init__(self, config_store: ConfigStore, backend: ConverterBackend):
        super().__init__()
        self._config_store = config_store
        self.session = ToolSession(backend, config_store)

        self.setWindowTitle("FluxForge")
        self.resize(1000, 620)
        self.setMinimumSize(700, 400)

        central = QWidget()
        self.setCentralWidget(central)
        outer = QHBoxLayout(central)

        # ── Left: tool picker + queue ─────────────────────────────────────────
        left = QVBoxLayout()
        self.tool_combo = QComboBox()
        for kind, profile in TOOL_PROFILES.items():
            self.tool_combo.addItem(profile.display_name, userData=kind)
        left.addWidget(self.tool_combo)

        self.file_list = _FileList(self.session.add_files)
        left.addWidget(self.file_list, 1)
        self.summary_lbl = QLabel("")
        left.addWidget(self.summary_lbl)

        row = QHBoxLayout()
        add_btn = QPushButton("Add files…")
        add_btn.clicked.connect(self._browse_files)
        remove_btn = QPushButton("Remove")
        remove_btn.clicked.connect(lambda: self.session.remove_at(self.file_list.currentRow()))
        row.addWidget(add_btn)
        row.addWidget(remove_btn)
        left.addLayout(row)
        outer.addLayout(left, 3)

        # ── Right: options ────────────────────────────────────────────────────
        right = QVBoxLayout()
        self.form = QFormLayout()

        self.job_combo = QComboBox()
        self.format_combo = QComboBox()
        self.dpi_combo = QComboBox()
        for dpi in DPI_PRESETS:
            self.dpi_combo.addItem(f"{dpi} DPI", userData=dpi)
        self.page_mode_combo = QComboBox()
        self.page_mode_combo.addItem("All pages", userData=PageMode.ALL)
        self.page_mode_combo.addItem("Select pages", userData=PageMode.SELECT)
        self.page_range_edit = QLineEdit()
        self.page_range_edit.setPlaceholderText("e.g. 1-3, 5, 8-10")
        self.split_edit = QLineEdit()
        self.split_edit.setPlaceholderText("e.g. 5, 10, 15")
        self.output_name_edit = QLineEdit()
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.start_spin = _seconds_spin(0.0)
        self.end_spin = _seconds_spin(60.0)
        self.width_spin = _int_spin(1, 7680, 480)
        self.height_spin = _int_spin(1, 4320, 270)
        self.fps_spin = _int_spin(5, 30, 15)
        self.quality_spin = _int_spin(1, 5, 3)
        self.estimate_lbl = QLabel("—")

        self._rows = {
            "job": ("Operation:", self.job_combo),
            "format": ("Format:", self.format_combo),
            "dpi": ("Resolution:", self.dpi_combo),
            "page_mode": ("Pages:", self.page_mode_combo),
            "page_range": ("Page range:", self.page_range_edit),
            "split": ("Split after:", self.split_edit),
            "output_name": ("Output name:", self.output_name_edit),
            "password": ("Password:", self.password_edit),
            "start": ("Start:", self.start_spin),
            "end": ("End:", self.end_spin),
            "width": ("Width:", self.width_spin),
            "height": ("Height:", self.height_spin),
            "fps": ("FPS:", self.fps_spin),
            "quality": ("Quality:", self.quality_spin),
            "estimate": ("Estimated size:", self.estimate_lbl),
        }
        for label, widget in self._rows.values():
            self.form.addRow(label, widget)
        right.addLayout(self.form)
        right.addStretch()

        settings_btn = QPushButton("Settings…")
        settings_btn.clicked.connect(self._open_settings)
        right.addWidget(settings_btn)

        self.status_lbl = QLabel("")
        self.status_lbl.setWordWrap(True)
        right.addWidget(self.status_lbl)

        self.open_btn = QPushButton("Open output folder")
        self.open_btn.setEnabled(False)
        self.open_btn.clicked.connect(self.session.open_output_folder)
        right.addWidget(self.open_btn)

        self.convert_btn = QPushButton("Convert")
        self.convert_btn.clicked.connect(self._convert)
        right.addWidget(self.convert_btn)
        outer.addLayout(right, 2)

        # ── Wire signals ──────────────────────────────────────────────────────
        self.tool_combo.currentIndexChanged.connect(self._on_tool_changed)
        self.job_combo.currentIndexChanged.connect(self._refresh_rows)
        for spin in (self.start_spin, self.end_spin, self.width_spin,
                     self.height_spin, self.fps_spin, self.quality_spin):
            spin.valueChanged.connect(self._refresh_estimate)

        self.session.queue_changed.connect(self._refresh_files)
        self.session.item_updated.connect(lambda _item: self._refresh_files())
        self.session.clip_probed.connect(self._on_clip_probed)
        self.session.files_rejected.connect(
            lambda n: self.status_lbl.setText(f"{n} file(s) were not accepted by this tool.")
        )
        self.session.busy_changed.connect(lambda busy: self.convert_btn.setEnabled(not busy))
        self.session.job_finished.connect(self._on_job_finished)

        self._on_tool_changed()

    # ── Tool / option state ───────────────────────────────────────────────────

    def _on_tool_changed(self):
        tool: ToolKind = self.tool_combo.currentData()
        self.session.set_tool(tool)

        self.job_combo.blockSignals(True)
        self.job_combo.clear()
        for kind, owner in JOB_TOOLS.items():
            if owner is tool and kind is not JobKind.PDF_TO_SVG:
                self.job_combo.addItem(kind.value.replace("_", " "), userData=kind)
        self.job_combo.blockSignals(False)

        self.format_combo.clear()
        if tool is ToolKind.ARCHIVE_COMPRESS:
            self.format_combo.addItems(ARCHIVE_FORMATS)
        else:
            self.format_combo.addItems(IMAGE_FORMATS)

        self._select_default_dpi()
        self._refresh_rows()

    def _select_default_dpi(self):
        dpi = self._config_store.current().default_pdf_dpi
        if dpi in DPI_PRESETS:
            self.dpi_combo.setCurrentIndex(DPI_PRESETS.index(dpi))

    def _refresh_rows(self):
        kind: JobKind = self.job_combo.currentData()
        visible = {
            JobKind.PDF_TO_IMAGE: {"format", "dpi", "page_mode", "page_range"},
            JobKind.PDF_MERGE: {"job", "output_name"},
            JobKind.PDF_SPLIT: {"job", "split"},
            JobKind.PDF_EXTRACT: {"job", "page_range", "output_name"},
            JobKind.ARCHIVE_COMPRESS: {"format", "output_name", "password"},
            JobKind.ARCHIVE_EXTRACT: {"password"},
            JobKind.VIDEO_TO_GIF: {"start", "end", "width", "height", "fps",
                                   "quality", "output_name", "estimate"},
        }.get(kind, set())
        for key, (_label, widget) in self._rows.items():
            self.form.setRowVisible(widget, key in visible)
        self._refresh_estimate()

    def _refresh_estimate(self):
        est = self.session.gif_estimate(self._tool_options())
        text = f"{est.estimated_size_mb:.1f} MB · {est.frame_count} frames"
        if est.is_large:
            text += "  ⚠ large files may be slow to share"
        self.estimate_lbl.setText(text)

    def _tool_options(self) -> ToolOptions:
        tool = self.session.tool
        fmt = self.format_combo.currentText() or None
        return ToolOptions(
            format=fmt if tool is ToolKind.PDF_CONVERT else None,
            archive_format=fmt if tool is ToolKind.ARCHIVE_COMPRESS else None,
            dpi=self.dpi_combo.currentData(),
            page_mode=self.page_mode_combo.currentData(),
            page_range=self.page_range_edit.text(),
            split_points=self.split_edit.text(),
            output_name=self.output_name_edit.text(),
            password=self.password_edit.text(),
            start_time=self.start_spin.value(),
            end_time=self.end_spin.value(),
            width=self.width_spin.value(),
            height=self.height_spin.value(),
            fps=self.fps_spin.value(),
            quality=self.quality_spin.value(),
        )

    def _refresh_files(self):
        queue = self.session.queue
        self.file_list.clear()
        for item in queue.items():
            detail = f"{item.page_count} page(s)" if queue.profile.probes_pages else ""
            self.file_list.addItem(f"{item.name}  ·  {_format_size(item.size)}  {detail}")

        summary = f"{len(queue)} file(s)"
        if queue.profile.probes_pages and len(queue):
            summary += f"  ·  {queue.total_pages} page(s) in total"
        self.summary_lbl.setText(summary)

    def _on_clip_probed(self, info: VideoInfo):
        defaults = self.session.gif_defaults(self.start_spin.value())
        if info.duration_seconds > 0:
            self.start_spin.setMaximum(info.duration_seconds)
            self.end_spin.setMaximum(info.duration_seconds)
        self.end_spin.setValue(defaults.end_time)
        self.width_spin.setValue(defaults.width)
        self.height_spin.setValue(defaults.height)
        self._refresh_estimate()

    # ── Actions ───────────────────────────────────────────────────────────────

    def _browse_files(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "Select Files")
        if paths:
            self.session.add_files(paths)

    def _convert(self):
        try:
            self.session.submit(self.job_combo.currentData(), self._tool_options())
        except FluxForgeError as exc:
            self.status_lbl.setText(str(exc))
            return
        self.status_lbl.setText("Converting…")

    def _on_job_finished(self, result: ConvertResult):
        self.status_lbl.setText(result.message)
        self.open_btn.setEnabled(result.output_folder is not None)

    def show_log_message(self, message: str):
        self.statusBar().showMessage(message, 8000)

    def _open_settings(self):
        current = self._config_store.current()
        dlg = SettingsDialog(current, parent=self)
        if dlg.exec() != QDialog.Accepted:
            return

        config = dlg.get_config()
        if config.theme is not current.theme:
            apply_theme(QApplication.instance(), config.theme)
        try:
            base = self.session.save_settings(config)
        except PersistError as exc:
            QMessageBox.warning(self, "Settings not saved", str(exc))
            return
        except OSError as exc:
            QMessageBox.warning(self, "Export folder not created", str(exc))
            return
        finally:
            self._select_default_dpi()
        self.status_lbl.setText(f"Exports go to {base}")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _int_spin(low: int, high: int, value: int) -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(low, high)
    spin.setValue(value)
    return spin


def _seconds_spin(value: float) -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setRange(0.0, 24 * 3600.0)
    spin.setDecimals(1)
    spin.setSuffix(" s")
    spin.setValue(value)
    return spin


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
