"""
Search settings dialog.

This dialog owns the "settings changed" flag. Its pages write their
selections back to the settings object when the user saves, and the dialog
writes the settings file only if something actually changed.
"""

from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QDialog, QFileDialog, QHBoxLayout, QMessageBox, QPushButton, QTabWidget, QVBoxLayout
)
from PySide6.QtCore import Slot

from cometsettings.config.settings import SearchSettings, SettingsManager
from cometsettings.core.models import DirtyFlag
from cometsettings.infrastructure.params_file import read_params_file, write_params_file
from cometsettings.infrastructure.logging_config import get_logger
from cometsettings.ui.enzyme_settings_widget import EnzymeSettingsWidget


logger = get_logger(__name__)


class SearchSettingsDialog(QDialog):
    """
    Dialog for editing the search settings.

    Tracks unsaved changes in ``settings_changed``; the flag is set by the
    pages during verification and cleared here after a successful save.
    """

    PARAMS_FILTER = "Comet Params (*.params);;All Files (*.*)"

    def __init__(self, settings_manager: SettingsManager, parent=None):
        """
        Initialize the search settings dialog.

        Args:
            settings_manager: Manager holding the loaded settings.
            parent: Parent widget.

        Raises:
            FormatError: If the stored enzyme catalogue is malformed.
        """
        super().__init__(parent)

        self._settings_manager = settings_manager
        self.settings_changed = DirtyFlag()

        self._setup_ui()
        self._connect_signals()

        logger.debug("SearchSettingsDialog initialized")

    def _setup_ui(self):
        """Setup the user interface."""
        self.setWindowTitle("Search Settings[*]")

        self.tabs = QTabWidget(self)
        self.enzymePage = self._create_enzyme_page()
        self.tabs.addTab(self.enzymePage, "&Enzyme")

        self.btnImport = QPushButton("&Import...", self)
        self.btnExport = QPushButton("E&xport...", self)
        self.btnSave = QPushButton("&Save", self)
        self.btnCancel = QPushButton("&Cancel", self)
        self.btnSave.setDefault(True)

        buttons = QHBoxLayout()
        buttons.addWidget(self.btnImport)
        buttons.addWidget(self.btnExport)
        buttons.addStretch()
        buttons.addWidget(self.btnSave)
        buttons.addWidget(self.btnCancel)

        layout = QVBoxLayout(self)
        layout.addWidget(self.tabs)
        layout.addLayout(buttons)

    def _create_enzyme_page(self, search: Optional[SearchSettings] = None) -> EnzymeSettingsWidget:
        if search is None:
            search = self._settings_manager.get().search
        page = EnzymeSettingsWidget(search, self.settings_changed.notify_dirty, self)
        page.enzymes_edited.connect(self._on_enzymes_edited)
        return page

    def _connect_signals(self):
        """Connect UI signals to slots."""
        self.btnImport.clicked.connect(self._on_import)
        self.btnExport.clicked.connect(self._on_export)
        self.btnSave.clicked.connect(self._on_save)
        self.btnCancel.clicked.connect(self.reject)

    def _replace_enzyme_page(self, page: EnzymeSettingsWidget):
        """Swap in a new enzyme page."""
        index = self.tabs.indexOf(self.enzymePage)
        old_page = self.enzymePage
        self.enzymePage = page
        self.tabs.removeTab(index)
        self.tabs.insertTab(index, self.enzymePage, "&Enzyme")
        self.tabs.setCurrentIndex(index)
        old_page.deleteLater()

    def verify_and_update_settings(self) -> bool:
        """
        Ask every page to write its selections back.

        Returns:
            False if a page refused, True otherwise.
        """
        return self.enzymePage.verify_and_update_settings()

    @Slot()
    def _on_save(self):
        """Handle Save button click."""
        if not self.verify_and_update_settings():
            return

        if not self.settings_changed:
            logger.debug("No settings changed, nothing to save")
            self.accept()
            return

        try:
            self._settings_manager.save()
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            QMessageBox.critical(self, "Error", f"Failed to save settings:\n{str(e)}")
            return

        self.settings_changed.clear()
        self.setWindowModified(False)
        self.accept()

    @Slot()
    def _on_import(self):
        """Import the enzyme settings from a comet.params file."""
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Import Search Settings", str(Path.home()), self.PARAMS_FILTER
        )
        if not file_path:
            return

        try:
            imported = read_params_file(Path(file_path))
            page = self._create_enzyme_page(imported)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to import {file_path}: {e}")
            QMessageBox.critical(self, "Import Failed", f"Could not import search settings:\n{str(e)}")
            return

        settings = self._settings_manager.get()
        changed = imported != settings.search
        settings.search = imported
        self._replace_enzyme_page(page)
        if changed:
            self.settings_changed.notify_dirty()
            self.setWindowModified(True)
        logger.info(f"Imported search settings from {file_path}")

    @Slot()
    def _on_export(self):
        """Export the enzyme settings to a comet.params file."""
        if not self.verify_and_update_settings():
            return

        file_path, _ = QFileDialog.getSaveFileName(
            self, "Export Search Settings", str(Path.home() / "comet.params"), self.PARAMS_FILTER
        )
        if not file_path:
            return

        try:
            write_params_file(Path(file_path), self._settings_manager.get().search)
        except OSError as e:
            logger.error(f"Failed to export {file_path}: {e}")
            QMessageBox.critical(self, "Export Failed", f"Could not export search settings:\n{str(e)}")

    @Slot()
    def _on_enzymes_edited(self):
        """Mark the window as having unsaved changes after a catalogue edit."""
        self.setWindowModified(True)
