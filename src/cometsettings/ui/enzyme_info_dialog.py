"""
Enzyme catalogue editor dialog.

This dialog lets the user add, remove and edit the enzymes offered by the
search and sample enzyme lists.
"""

from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QHBoxLayout, QHeaderView, QMessageBox,
    QPushButton, QTableWidget, QTableWidgetItem, QVBoxLayout
)
from PySide6.QtCore import Qt, Slot

from cometsettings.core.enzyme_config import FIELD_NAME, FIELD_NUMBER, FIELD_OFFSET
from cometsettings.core.models import EditorResult, ReferenceDataset
from cometsettings.core.reference_store import ReferenceDatasetStore
from cometsettings.infrastructure.record_codec import FIELD_SEPARATOR
from cometsettings.infrastructure.logging_config import get_logger


logger = get_logger(__name__)


class EnzymeInfoDialog(QDialog):
    """
    Modal editor over the shared enzyme catalogue.

    Each call to open_editor() starts from the store's current records and
    reports the outcome; nothing is remembered between calls. Enzyme numbers
    follow row order and are not editable.
    """

    COLUMNS = ["Number", "Name", "Offset", "Break AA", "No-Break AA"]

    def __init__(self, store: ReferenceDatasetStore, parent=None):
        """
        Initialize the catalogue editor.

        Args:
            store: Shared catalogue store to read from.
            parent: Parent widget.
        """
        super().__init__(parent)

        self._store = store

        self._setup_ui()
        self._connect_signals()

        logger.debug("EnzymeInfoDialog initialized")

    def _setup_ui(self):
        """Setup the user interface."""
        self.setWindowTitle("Edit Enzymes")
        self.setModal(True)
        self.resize(560, 380)

        self.table = QTableWidget(0, len(self.COLUMNS), self)
        self.table.setHorizontalHeaderLabels(self.COLUMNS)
        self.table.horizontalHeader().setSectionResizeMode(FIELD_NAME, QHeaderView.ResizeMode.Stretch)
        self.table.verticalHeader().setVisible(False)

        self.btnAdd = QPushButton("&Add", self)
        self.btnRemove = QPushButton("&Remove", self)
        self.buttonBox = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
            parent=self
        )

        rowButtons = QHBoxLayout()
        rowButtons.addWidget(self.btnAdd)
        rowButtons.addWidget(self.btnRemove)
        rowButtons.addStretch()

        layout = QVBoxLayout(self)
        layout.addWidget(self.table)
        layout.addLayout(rowButtons)
        layout.addWidget(self.buttonBox)

    def _connect_signals(self):
        """Connect UI signals to slots."""
        self.btnAdd.clicked.connect(self._on_add)
        self.btnRemove.clicked.connect(self._on_remove)
        self.buttonBox.accepted.connect(self._on_accept)
        self.buttonBox.rejected.connect(self.reject)

    def open_editor(self) -> EditorResult:
        """
        Show the editor modally and report what the user did.

        Returns:
            EditorResult with the edited records when the user pressed OK.
        """
        original = self._store.current()
        self._populate(original)

        if self.exec() != QDialog.DialogCode.Accepted:
            logger.debug("Enzyme editor cancelled")
            return EditorResult(committed=False)

        records = self.get_records()
        changed = records != original
        logger.debug(f"Enzyme editor accepted, changed={changed}")
        return EditorResult(committed=True, changed=changed, records=records)

    def _populate(self, records: ReferenceDataset):
        """Fill the table with catalogue records."""
        self.table.setRowCount(0)
        for record in records:
            self._append_row(record)

    def _append_row(self, record):
        row = self.table.rowCount()
        self.table.insertRow(row)
        for column, value in enumerate(record):
            item = QTableWidgetItem(value)
            if column == FIELD_NUMBER:
                item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEditable)
            self.table.setItem(row, column, item)

    def _renumber(self):
        """Keep enzyme numbers equal to row positions."""
        for row in range(self.table.rowCount()):
            self.table.item(row, FIELD_NUMBER).setText(str(row))

    def get_records(self) -> ReferenceDataset:
        """
        Read the records currently in the table.

        Returns:
            Tuple of records in row order.
        """
        records = []
        for row in range(self.table.rowCount()):
            fields = []
            for column in range(self.table.columnCount()):
                item = self.table.item(row, column)
                fields.append(item.text().strip() if item is not None else "")
            records.append(tuple(fields))
        return tuple(records)

    def _validate(self) -> list[str]:
        """
        Check the table contents.

        Returns:
            List of problems, empty if the records can be accepted.
        """
        problems = []
        if self.table.rowCount() == 0:
            problems.append("The list must contain at least one enzyme")
        for row, record in enumerate(self.get_records()):
            if not record[FIELD_NAME]:
                problems.append(f"Row {row}: name is empty")
            if any(not value for value in record):
                problems.append(f"Row {row}: use '-' for an empty column")
            if any(FIELD_SEPARATOR in value or " " in value for value in record):
                problems.append(f"Row {row}: values cannot contain commas or spaces")
            if record[FIELD_OFFSET] not in ("0", "1"):
                problems.append(f"Row {row}: offset must be 0 or 1")
        return problems

    @Slot()
    def _on_add(self):
        """Append a blank enzyme row."""
        self._append_row((str(self.table.rowCount()), "New_enzyme", "1", "-", "-"))
        self.table.setCurrentCell(self.table.rowCount() - 1, FIELD_NAME)

    @Slot()
    def _on_remove(self):
        """Remove the selected enzyme rows."""
        rows = sorted({index.row() for index in self.table.selectedIndexes()}, reverse=True)
        for row in rows:
            self.table.removeRow(row)
        self._renumber()

    @Slot()
    def _on_accept(self):
        """Validate and accept the dialog."""
        problems = self._validate()
        if problems:
            QMessageBox.warning(self, "Invalid Enzymes", "\n".join(problems))
            return
        self.accept()
