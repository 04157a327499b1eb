"""
Shared store for the enzyme catalogue.

Every enzyme selection list is derived from the one catalogue held here.
The catalogue is replaced wholesale when the catalogue editor commits and is
read-only for everyone else.
"""

from typing import Callable, Iterable

from .models import ReferenceDataset, ReferenceRecord
from ..infrastructure.record_codec import check_arity
from ..infrastructure.logging_config import get_logger

logger = get_logger(__name__)


class ReferenceDatasetStore:
    """
    Holds the ordered catalogue records for one settings session.

    Besides the live records the store remembers the catalogue as it was last
    written to configuration, so callers can ask whether it has been modified.
    """

    def __init__(self):
        self._records: ReferenceDataset = ()
        self._persisted: ReferenceDataset = ()
        self._generation = 0
        self._listeners: list[Callable[[ReferenceDataset], None]] = []

    @property
    def generation(self) -> int:
        """Counter bumped on every effective replacement."""
        return self._generation

    def load(self, initial: Iterable[ReferenceRecord]) -> None:
        """
        Seed the catalogue from persisted configuration.

        Args:
            initial: Records in display order.

        Raises:
            FormatError: If the records do not all have the same arity.
        """
        records = check_arity(initial)
        self._records = records
        self._persisted = records
        self._generation += 1
        logger.debug(f"Enzyme catalogue loaded with {len(records)} records")

    def current(self) -> ReferenceDataset:
        """
        Get the live catalogue.

        Returns:
            Immutable tuple of records.
        """
        return self._records

    def replace_all(self, updated: Iterable[ReferenceRecord]) -> bool:
        """
        Swap in a new catalogue.

        Args:
            updated: The complete new set of records, in display order.

        Returns:
            True if the new records differ from the old ones field by field.

        Raises:
            FormatError: If the new records do not all have the same arity.
        """
        records = check_arity(updated)
        if records == self._records:
            logger.debug("Enzyme catalogue replacement is identical, nothing to do")
            return False

        self._records = records
        self._generation += 1
        logger.info(f"Enzyme catalogue replaced ({len(records)} records, generation {self._generation})")

        for listener in list(self._listeners):
            listener(records)
        return True

    def is_modified(self) -> bool:
        """Check whether the catalogue differs from the last persisted one."""
        return self._records != self._persisted

    def mark_persisted(self) -> None:
        """Record the live catalogue as the one now held in configuration."""
        self._persisted = self._records

    def add_listener(self, callback: Callable[[ReferenceDataset], None]) -> None:
        """
        Register a callback invoked with the new records after each change.

        Args:
            callback: Function taking the new catalogue.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[ReferenceDataset], None]) -> None:
        """Unregister a previously added callback."""
        if callback in self._listeners:
            self._listeners.remove(callback)
