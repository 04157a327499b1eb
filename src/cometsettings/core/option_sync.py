"""
Option synchronizer for the enzyme settings page.

The page shows several selection lists. Two of them (search and sample
enzyme) are derived from the shared enzyme catalogue and end with an
``<Edit List...>`` entry that opens the catalogue editor instead of
selecting a value. The synchronizer tracks, per list, the value last
written to configuration against the entry currently displayed, and on
reconciliation writes back what changed and tells the owning dialog.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from .models import (
    EditorResult,
    EditRequested,
    EnzymeTermini,
    InvariantError,
    ReferenceDataset,
    ReferenceRecord,
    Selected,
    SelectionResult,
)
from .enzyme_config import EDIT_LIST_LABEL, MISSED_CLEAVAGE_CHOICES, enzyme_identity, enzyme_label
from .reference_store import ReferenceDatasetStore
from ..config.settings import SearchSettings
from ..infrastructure.record_codec import parse_records, serialize_records
from ..infrastructure.logging_config import get_logger

logger = get_logger(__name__)

# Slot identifiers used by the enzyme settings page
SEARCH_ENZYME_SLOT = "search_enzyme"
SAMPLE_ENZYME_SLOT = "sample_enzyme"
MISSED_CLEAVAGES_SLOT = "missed_cleavages"
ENZYME_TERMINI_SLOT = "enzyme_termini"


class OptionBinding:
    """
    Base class describing how a list's entries map to persisted values.

    Subclasses build the list labels and translate between a list index and
    the key stored in configuration.
    """

    dataset_backed = False
    """True if the list is derived from the catalogue and ends in the edit entry."""

    def build_labels(self, records: ReferenceDataset) -> list[str]:
        raise NotImplementedError("Subclasses must implement build_labels()")

    def key_at(self, index: int, labels: Sequence[str]) -> Any:
        raise NotImplementedError("Subclasses must implement key_at()")

    def index_of(self, key: Any, labels: Sequence[str]) -> int:
        raise NotImplementedError("Subclasses must implement index_of()")


class PositionalBinding(OptionBinding):
    """Fixed list whose selected index is itself the persisted value."""

    def __init__(self, choices: Sequence[str]):
        self._choices = list(choices)

    def build_labels(self, records: ReferenceDataset) -> list[str]:
        return list(self._choices)

    def key_at(self, index: int, labels: Sequence[str]) -> Any:
        return index

    def index_of(self, key: Any, labels: Sequence[str]) -> int:
        selectable = len(labels) - 1 if self.dataset_backed else len(labels)
        if not isinstance(key, int) or not 0 <= key < selectable:
            raise ValueError(f"Value {key!r} has no entry in a list of {selectable} items")
        return key


class DatasetBinding(PositionalBinding):
    """
    List derived from the shared catalogue, followed by the edit entry.

    Each record contributes one label built by ``label_rule``; the record's
    position is the persisted value. ``identity_rule`` picks the fields that
    decide whether a record survived a catalogue edit.
    """

    dataset_backed = True

    def __init__(self, label_rule: Callable[[ReferenceRecord], str] = enzyme_label,
                 sentinel_label: str = EDIT_LIST_LABEL,
                 identity_rule: Callable[[ReferenceRecord], Any] = enzyme_identity):
        super().__init__([])
        self._label_rule = label_rule
        self._sentinel_label = sentinel_label
        self._identity_rule = identity_rule

    def build_labels(self, records: ReferenceDataset) -> list[str]:
        labels = [self._label_rule(record) for record in records]
        labels.append(self._sentinel_label)
        return labels

    def identity(self, record: ReferenceRecord) -> Any:
        return self._identity_rule(record)


class LabelKeyedBinding(OptionBinding):
    """
    List whose persisted value is a key looked up from the displayed label.

    The mapping is closed: every label shown comes from it, so a label with
    no key means the list and the mapping have drifted apart.
    """

    def __init__(self, mapping: dict[Any, str]):
        self._mapping = dict(mapping)

    @classmethod
    def from_enum(cls, enum_cls: type[EnzymeTermini]) -> 'LabelKeyedBinding':
        """Build a binding from an enumeration exposing ``label_mapping()``."""
        return cls(enum_cls.label_mapping())

    def build_labels(self, records: ReferenceDataset) -> list[str]:
        return list(self._mapping.values())

    def key_at(self, index: int, labels: Sequence[str]) -> Any:
        label = labels[index]
        for key, candidate in self._mapping.items():
            if candidate == label:
                return key
        raise InvariantError(f"Label {label!r} has no key in {self._mapping!r}")

    def index_of(self, key: Any, labels: Sequence[str]) -> int:
        if key not in self._mapping:
            raise ValueError(f"Value {key!r} is not one of {list(self._mapping)}")
        return labels.index(self._mapping[key])


@dataclass
class SelectionSlot:
    """State of one selection list."""

    slot_id: str
    binding: OptionBinding
    setting: str
    """Name of the SearchSettings attribute this list mirrors."""

    persisted_value: Any = None
    displayed_index: int = 0
    labels: list[str] = field(default_factory=list)
    generation: int = 0
    """Catalogue generation the labels were built from."""

    @property
    def sentinel_index(self) -> Optional[int]:
        """Index of the edit entry, or None for lists without one."""
        if not self.binding.dataset_backed:
            return None
        return len(self.labels) - 1

    @property
    def on_sentinel(self) -> bool:
        return self.sentinel_index is not None and self.displayed_index == self.sentinel_index

    @property
    def displayed_label(self) -> str:
        return self.labels[self.displayed_index]


class OptionSynchronizer:
    """
    Keeps selection lists, the shared catalogue and the settings in step.

    The settings object is passed in explicitly and updated in place by
    reconcile(). Opening the catalogue editor is delegated to
    ``open_editor``, which must block until the user dismisses it.
    """

    def __init__(
        self,
        settings: SearchSettings,
        store: ReferenceDatasetStore,
        open_editor: Callable[[], EditorResult],
        notify_dirty: Callable[[], None],
        collection_setting: str = "enzyme_info",
    ):
        """
        Initialize the synchronizer.

        Args:
            settings: Settings object the lists mirror.
            store: Shared catalogue store.
            open_editor: Modal catalogue editor.
            notify_dirty: Called once per reconcile that finds a change.
            collection_setting: Settings attribute holding the serialized catalogue.
        """
        self._settings = settings
        self._store = store
        self._open_editor = open_editor
        self._notify_dirty = notify_dirty
        self._collection_setting = collection_setting
        self._slots: dict[str, SelectionSlot] = {}
        self._observers: list[Callable[[], bool]] = []
        self._editing = False

    @property
    def store(self) -> ReferenceDatasetStore:
        return self._store

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    @property
    def editing(self) -> bool:
        """True while the catalogue editor is open."""
        return self._editing

    def add_slot(self, slot_id: str, binding: OptionBinding, setting: str) -> SelectionSlot:
        """
        Create a selection list and seed it from the settings object.

        Args:
            slot_id: Stable identifier of the list.
            binding: How entries map to persisted values.
            setting: SearchSettings attribute holding the persisted value.

        Returns:
            The new slot.

        Raises:
            ValueError: If the slot already exists or the persisted value has no entry.
        """
        if slot_id in self._slots:
            raise ValueError(f"Slot already exists: {slot_id}")

        slot = SelectionSlot(slot_id=slot_id, binding=binding, setting=setting)
        self._slots[slot_id] = slot
        try:
            self.initialize(slot_id, getattr(self._settings, setting))
        except ValueError:
            del self._slots[slot_id]
            raise
        return slot

    def initialize(self, slot_id: str, persisted_value: Any) -> None:
        """
        Point a list at a persisted value.

        Args:
            slot_id: List to initialize.
            persisted_value: Value as held in configuration.

        Raises:
            ValueError: If the value has no entry in the list.
        """
        slot = self.slot(slot_id)
        labels = slot.binding.build_labels(self._store.current())
        try:
            index = slot.binding.index_of(persisted_value, labels)
        except ValueError as e:
            raise ValueError(f"{slot.setting} = {persisted_value!r} is missing from the list: {e}") from e

        slot.labels = labels
        slot.generation = self._store.generation
        slot.displayed_index = index
        slot.persisted_value = persisted_value
        logger.debug(f"Slot {slot_id} initialized to index {index} ({persisted_value!r})")

    def slot(self, slot_id: str) -> SelectionSlot:
        """Get a slot by id, raising KeyError if unknown."""
        try:
            return self._slots[slot_id]
        except KeyError:
            raise KeyError(f"Unknown selection slot: {slot_id}") from None

    @property
    def slots(self) -> list[SelectionSlot]:
        return list(self._slots.values())

    def add_change_observer(self, observer: Callable[[], bool]) -> None:
        """
        Register an extra "did the catalogue change?" check for reconcile().

        Args:
            observer: Callable returning True if its editor changed the catalogue.
        """
        self._observers.append(observer)

    def interpret(self, slot_id: str, index: int) -> SelectionResult:
        """
        Classify a selection event.

        Args:
            slot_id: List the user interacted with.
            index: Index the user picked.

        Returns:
            EditRequested for the edit entry, Selected otherwise.

        Raises:
            IndexError: If the index is outside the list.
        """
        slot = self.slot(slot_id)
        if not 0 <= index < len(slot.labels):
            raise IndexError(f"Index {index} out of range for slot {slot_id} ({len(slot.labels)} entries)")
        if index == slot.sentinel_index:
            return EditRequested()
        return Selected(index)

    def select(self, slot_id: str, index: int) -> int:
        """
        Handle the user picking an entry.

        Picking the edit entry opens the catalogue editor. When it returns with
        a changed catalogue every list is rebuilt; otherwise the list goes back
        to what it showed before.

        Args:
            slot_id: List the user interacted with.
            index: Index the user picked.

        Returns:
            The index the list must now display.
        """
        slot = self.slot(slot_id)
        if self._editing:
            logger.debug(f"Ignoring selection on {slot_id} while the catalogue editor is open")
            return slot.displayed_index

        result = self.interpret(slot_id, index)
        if isinstance(result, Selected):
            slot.displayed_index = result.index
            return slot.displayed_index

        return self._edit_catalogue(slot)

    def _edit_catalogue(self, slot: SelectionSlot) -> int:
        previous_index = slot.displayed_index
        prior = self._displayed_records()

        logger.debug(f"Opening catalogue editor from slot {slot.slot_id}")
        self._editing = True
        try:
            result = self._open_editor()
        finally:
            self._editing = False

        if result.committed and result.changed and result.records is not None:
            if self._store.replace_all(result.records):
                self._rebuild(prior)
                return slot.displayed_index

        logger.debug(f"Catalogue unchanged, restoring slot {slot.slot_id} to index {previous_index}")
        slot.displayed_index = previous_index
        return slot.displayed_index

    def _displayed_records(self) -> dict[str, tuple[int, ReferenceRecord]]:
        records = self._store.current()
        displayed = {}
        for slot in self._slots.values():
            if slot.binding.dataset_backed and not slot.on_sentinel:
                displayed[slot.slot_id] = (slot.displayed_index, records[slot.displayed_index])
        return displayed

    def rebuild(self) -> None:
        """Rebuild every list from the current catalogue, keeping selections where possible."""
        self._rebuild(self._displayed_records())

    def _rebuild(self, prior: dict[str, tuple[int, ReferenceRecord]]) -> None:
        records = self._store.current()
        generation = self._store.generation

        # Compute everything before touching any slot
        updates = {}
        for slot_id, slot in self._slots.items():
            labels = slot.binding.build_labels(records)
            if not slot.binding.dataset_backed:
                updates[slot_id] = (labels, slot.displayed_index)
                continue

            index = len(labels) - 1
            if slot_id in prior:
                old_index, record = prior[slot_id]
                identity = slot.binding.identity(record)
                identities = [slot.binding.identity(candidate) for candidate in records]
                if old_index < len(records) and identities[old_index] == identity:
                    index = old_index
                elif identity in identities:
                    index = identities.index(identity)
            updates[slot_id] = (labels, index)

        for slot_id, (labels, index) in updates.items():
            slot = self._slots[slot_id]
            slot.labels = labels
            slot.displayed_index = index
            slot.generation = generation

        logger.debug(f"Rebuilt {len(updates)} selection lists at generation {generation}")

    def unresolved_slots(self) -> list[str]:
        """
        Get the lists left showing the edit entry.

        This happens when the record a list showed was removed from the
        catalogue; such lists have no value to persist until the user picks one.

        Returns:
            Slot ids.
        """
        return [slot.slot_id for slot in self._slots.values() if slot.on_sentinel]

    def reconcile(self) -> bool:
        """
        Write changed selections back to the settings object.

        Returns:
            True if any persisted value or the catalogue changed.
        """
        dirty = False

        for slot in self._slots.values():
            if slot.on_sentinel:
                logger.warning(f"Slot {slot.slot_id} has no selection, keeping {slot.setting} = {slot.persisted_value!r}")
                continue

            key = slot.binding.key_at(slot.displayed_index, slot.labels)
            if key != slot.persisted_value:
                logger.info(f"{slot.setting} changed: {slot.persisted_value!r} -> {key!r}")
                slot.persisted_value = key
                setattr(self._settings, slot.setting, key)
                dirty = True

        observed = [observer() for observer in self._observers]
        if self._store.is_modified() or any(observed):
            setattr(self._settings, self._collection_setting, serialize_records(self._store.current()))
            self._store.mark_persisted()
            logger.info("Enzyme catalogue changed")
            dirty = True

        if dirty:
            self._notify_dirty()
        return dirty


def create_enzyme_synchronizer(
    settings: SearchSettings,
    open_editor: Callable[[], EditorResult],
    notify_dirty: Callable[[], None],
    store: Optional[ReferenceDatasetStore] = None,
) -> OptionSynchronizer:
    """
    Build the synchronizer for the standard enzyme settings page.

    Args:
        settings: Search settings to mirror.
        open_editor: Modal catalogue editor.
        notify_dirty: Owning context's "settings changed" hook.
        store: Catalogue store; a new one is loaded from ``settings.enzyme_info`` if None.

    Returns:
        Synchronizer with the search enzyme, sample enzyme, missed cleavages
        and enzyme termini lists.

    Raises:
        FormatError: If the stored catalogue rows have inconsistent arity.
        ValueError: If a stored value has no entry in its list.
    """
    if store is None:
        store = ReferenceDatasetStore()
        store.load(parse_records(settings.enzyme_info))

    synchronizer = OptionSynchronizer(settings, store, open_editor, notify_dirty)
    synchronizer.add_slot(SEARCH_ENZYME_SLOT, DatasetBinding(), "search_enzyme_number")
    synchronizer.add_slot(SAMPLE_ENZYME_SLOT, DatasetBinding(), "sample_enzyme_number")
    synchronizer.add_slot(MISSED_CLEAVAGES_SLOT, PositionalBinding(MISSED_CLEAVAGE_CHOICES), "allowed_missed_cleavages")
    synchronizer.add_slot(ENZYME_TERMINI_SLOT, LabelKeyedBinding.from_enum(EnzymeTermini), "enzyme_termini")
    return synchronizer
