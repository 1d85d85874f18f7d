# ui/dialogs/settings_dialog.py

from dataclasses import replace

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit,
    QPushButton, QFileDialog, QComboBox, QCheckBox, QDialogButtonBox,
)

from fluxforge.models import AppConfig, Theme
from fluxforge.paths import default_export_root
from fluxforge.tools import DPI_PRESETS


class SettingsDialog(QDialog):
    """Edits the persisted AppConfig. The caller saves what get_config() returns."""

    def __init__(self, config: AppConfig, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(480)
        self._config = config

        self._build_ui()
        self.populate_from_config(config)

    # ── UI construction ───────────────────────────────────────────────────────

    def _build_ui(self):
        layout = QVBoxLayout(self)
        form = QFormLayout()

        folder_layout = QHBoxLayout()
        self.folder_edit = QLineEdit()
        self.folder_edit.setPlaceholderText(str(default_export_root()))
        folder_btn = QPushButton("Browse...")
        folder_btn.clicked.connect(self._browse_folder)
        folder_layout.addWidget(self.folder_edit, 1)
        folder_layout.addWidget(folder_btn)
        form.addRow("Export Folder:", folder_layout)

        self.folder_name_edit = QLineEdit()
        form.addRow("Folder Name:", self.folder_name_edit)

        self.date_check = QCheckBox("Create a dated subfolder per export day")
        form.addRow("", self.date_check)

        self.dpi_combo = QComboBox()
        for dpi in DPI_PRESETS:
            self.dpi_combo.addItem(f"{dpi} DPI", userData=dpi)
        form.addRow("PDF Resolution:", self.dpi_combo)

        self.theme_combo = QComboBox()
        for theme in Theme:
            self.theme_combo.addItem(theme.value.capitalize(), userData=theme)
        form.addRow("Theme:", self.theme_combo)

        layout.addLayout(form)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

    def populate_from_config(self, config: AppConfig) -> None:
        self.folder_edit.setText(config.export_folder)
        self.folder_name_edit.setText(config.export_folder_name)
        self.date_check.setChecked(config.auto_create_date_folders)
        index = self.dpi_combo.findData(config.default_pdf_dpi)
        self.dpi_combo.setCurrentIndex(index if index >= 0 else DPI_PRESETS.index(150))
        self.theme_combo.setCurrentIndex(list(Theme).index(config.theme))

    # ── Browse helpers ────────────────────────────────────────────────────────

    def _browse_folder(self):
        start = self.folder_edit.text() or str(default_export_root())
        path = QFileDialog.getExistingDirectory(self, "Select Export Folder", start)
        if path:
            self.folder_edit.setText(path)

    # ── Result ────────────────────────────────────────────────────────────────

    def get_config(self) -> AppConfig:
        return replace(
            self._config,
            export_folder=self.folder_edit.text().strip(),
            export_folder_name=self.folder_name_edit.text().strip() or AppConfig().export_folder_name,
            auto_create_date_folders=self.date_check.isChecked(),
            default_pdf_dpi=self.dpi_combo.currentData(),
            theme=self.theme_combo.currentData(),
        )
