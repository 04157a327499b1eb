"""
Enzyme settings page.

This widget shows the search enzyme, sample enzyme, missed cleavages and
enzyme termini lists and keeps them in step with the search settings
through an OptionSynchronizer.
"""

from typing import Callable

from PySide6.QtWidgets import QComboBox, QFormLayout, QLabel, QMessageBox, QWidget
from PySide6.QtCore import Signal

from cometsettings.config.settings import SearchSettings
from cometsettings.core.enzyme_config import describe_search_enzyme
from cometsettings.core.option_sync import (
    ENZYME_TERMINI_SLOT,
    MISSED_CLEAVAGES_SLOT,
    SAMPLE_ENZYME_SLOT,
    SEARCH_ENZYME_SLOT,
    create_enzyme_synchronizer,
)
from cometsettings.core.reference_store import ReferenceDatasetStore
from cometsettings.infrastructure.record_codec import parse_records
from cometsettings.infrastructure.logging_config import get_logger
from cometsettings.ui.enzyme_info_dialog import EnzymeInfoDialog


logger = get_logger(__name__)


class EnzymeSettingsWidget(QWidget):
    """
    Enzyme page of the search settings dialog.

    Selecting "<Edit List...>" in either enzyme list opens the catalogue
    editor; afterwards all lists are repopulated from the synchronizer.
    """

    # Emitted after the catalogue editor changed the enzyme list
    enzymes_edited = Signal()

    SLOT_TITLES = {
        SEARCH_ENZYME_SLOT: "Search &enzyme:",
        SAMPLE_ENZYME_SLOT: "S&ample enzyme:",
        MISSED_CLEAVAGES_SLOT: "Allowed &missed cleavages:",
        ENZYME_TERMINI_SLOT: "Enzyme &termini:",
    }

    def __init__(self, search: SearchSettings, notify_dirty: Callable[[], None], parent=None):
        """
        Initialize the enzyme settings page.

        Args:
            search: Search settings to edit; updated in place on verify.
            notify_dirty: Owning dialog's "settings changed" hook.
            parent: Parent widget.

        Raises:
            FormatError: If the stored enzyme catalogue is malformed.
            ValueError: If a stored selection has no entry in its list.
        """
        super().__init__(parent)

        self._store = ReferenceDatasetStore()
        self._store.load(parse_records(search.enzyme_info))
        self._store.add_listener(self._on_catalogue_replaced)
        self._catalogue_replaced = False
        self._enzyme_dialog = EnzymeInfoDialog(self._store, self)
        self._sync = create_enzyme_synchronizer(
            search, self._enzyme_dialog.open_editor, notify_dirty, store=self._store
        )
        self._combos: dict[str, QComboBox] = {}

        self._setup_ui()
        self._refresh_combos()
        self._connect_signals()

        logger.debug("EnzymeSettingsWidget initialized")

    @property
    def synchronizer(self):
        return self._sync

    def _setup_ui(self):
        """Setup the user interface."""
        layout = QFormLayout(self)
        for slot_id, title in self.SLOT_TITLES.items():
            combo = QComboBox(self)
            combo.setObjectName(f"{slot_id}Combo")
            self._combos[slot_id] = combo
            layout.addRow(title, combo)

        self.summaryLabel = QLabel(self)
        layout.addRow(self.summaryLabel)

    def _connect_signals(self):
        """Connect UI signals to slots."""
        for slot_id, combo in self._combos.items():
            combo.activated.connect(lambda index, sid=slot_id: self._on_activated(sid, index))

    def _refresh_combos(self):
        """Repopulate every list from the synchronizer's slots."""
        for slot in self._sync.slots:
            combo = self._combos[slot.slot_id]
            combo.blockSignals(True)
            if [combo.itemText(i) for i in range(combo.count())] != slot.labels:
                combo.clear()
                combo.addItems(slot.labels)
            combo.setCurrentIndex(slot.displayed_index)
            combo.blockSignals(False)
        self._update_summary()

    def _update_summary(self):
        """Show how Comet will describe the chosen search enzyme."""
        search_slot = self._sync.slot(SEARCH_ENZYME_SLOT)
        if search_slot.on_sentinel:
            self.summaryLabel.setText("Select a search enzyme")
            return

        termini_slot = self._sync.slot(ENZYME_TERMINI_SLOT)
        record = self._store.current()[search_slot.displayed_index]
        termini = termini_slot.binding.key_at(termini_slot.displayed_index, termini_slot.labels)
        missed = self._sync.slot(MISSED_CLEAVAGES_SLOT).displayed_index
        self.summaryLabel.setText(describe_search_enzyme(record, missed, termini))

    def _on_catalogue_replaced(self, records):
        logger.debug(f"Enzyme catalogue now has {len(records)} enzymes")
        self._catalogue_replaced = True

    def _on_activated(self, slot_id: str, index: int):
        """Handle the user picking an entry in one of the lists."""
        self._sync.select(slot_id, index)
        self._refresh_combos()
        if self._catalogue_replaced:
            self._catalogue_replaced = False
            self.enzymes_edited.emit()

    def verify_and_update_settings(self) -> bool:
        """
        Write the page's selections back to the search settings.

        Returns:
            False if a list still needs a selection, True otherwise.
        """
        unresolved = self._sync.unresolved_slots()
        if unresolved:
            names = ", ".join(self.SLOT_TITLES[slot_id].replace("&", "").rstrip(":") for slot_id in unresolved)
            QMessageBox.warning(self, "Enzyme Settings", f"Please select a value for: {names}")
            return False

        self._sync.reconcile()
        return True
