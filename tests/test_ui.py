"""
Tests for the enzyme settings page and the search settings dialog.

The catalogue editor is replaced by a fixed result so no modal dialog is
shown; widgets run on the offscreen Qt platform.
"""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication, QComboBox

from cometsettings.config.settings import SearchSettings, SettingsManager
from cometsettings.core.enzyme_config import EDIT_LIST_LABEL, renumber_records
from cometsettings.core.models import EditorResult
from cometsettings.core.option_sync import SEARCH_ENZYME_SLOT
from cometsettings.infrastructure.record_codec import parse_records
from cometsettings.ui.enzyme_info_dialog import EnzymeInfoDialog
from cometsettings.ui.enzyme_settings_widget import EnzymeSettingsWidget
from cometsettings.ui.search_settings_dialog import SearchSettingsDialog


@pytest.fixture(scope="session")
def qapp():
    """Shared QApplication for widget tests."""
    return QApplication.instance() or QApplication([])


@pytest.fixture
def without_trypsin_p():
    """
    Default catalogue with Trypsin/P removed, as the editor returns it.

    Returns:
        Renumbered catalogue records.
    """
    records = parse_records(SearchSettings().enzyme_info)
    return renumber_records(records[:2] + records[3:])


def use_editor_result(monkeypatch, result):
    monkeypatch.setattr(EnzymeInfoDialog, "open_editor", lambda self: result)


def search_combo(widget) -> QComboBox:
    return widget.findChild(QComboBox, f"{SEARCH_ENZYME_SLOT}Combo")


class TestEnzymeSettingsWidget:
    """Tests for the enzyme settings page."""

    def test_catalogue_edit_refreshes_lists(self, qapp, monkeypatch, without_trypsin_p):
        """Test that the lists follow an edited catalogue and the page reports it."""
        use_editor_result(monkeypatch, EditorResult(committed=True, changed=True, records=without_trypsin_p))
        widget = EnzymeSettingsWidget(SearchSettings(search_enzyme_number=5), lambda: None)
        edited = []
        widget.enzymes_edited.connect(lambda: edited.append(True))

        combo = search_combo(widget)
        combo.activated.emit(combo.count() - 1)

        assert edited == [True]
        assert combo.count() == len(without_trypsin_p) + 1
        assert combo.itemText(combo.count() - 1) == EDIT_LIST_LABEL
        assert combo.currentText() == "Arg_C (R/P)"

    def test_cancelled_edit_is_not_reported(self, qapp, monkeypatch):
        """Test that cancelling the editor restores the list without signalling."""
        use_editor_result(monkeypatch, EditorResult(committed=False))
        widget = EnzymeSettingsWidget(SearchSettings(), lambda: None)
        edited = []
        widget.enzymes_edited.connect(lambda: edited.append(True))

        combo = search_combo(widget)
        combo.activated.emit(combo.count() - 1)

        assert edited == []
        assert combo.currentText() == "Trypsin (KR/P)"


class TestSearchSettingsDialog:
    """Tests for the search settings dialog."""

    def test_catalogue_edit_marks_window_modified(self, qapp, monkeypatch, tmp_path, without_trypsin_p):
        """Test that a catalogue edit shows as unsaved until the settings are saved."""
        use_editor_result(monkeypatch, EditorResult(committed=True, changed=True, records=without_trypsin_p))
        manager = SettingsManager(config_file=tmp_path / "settings.json")
        dialog = SearchSettingsDialog(manager)
        assert not dialog.isWindowModified()

        combo = search_combo(dialog.enzymePage)
        combo.activated.emit(combo.count() - 1)
        assert dialog.isWindowModified()

        dialog.btnSave.click()

        assert not dialog.isWindowModified()
        assert not dialog.settings_changed
        assert manager.config_file.exists()
        assert manager.get().search.enzyme_info[2] == "2,Lys_C,1,K,P"
