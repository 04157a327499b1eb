"""
Pytest configuration and shared fixtures.

This file contains pytest configuration and reusable test fixtures.
"""

import pytest

from cometsettings.config.settings import SearchSettings
from cometsettings.core.models import DirtyFlag, EditorResult
from cometsettings.core.option_sync import OptionSynchronizer, create_enzyme_synchronizer
from cometsettings.core.reference_store import ReferenceDatasetStore
from cometsettings.infrastructure.record_codec import serialize_records


NO_ENZYME = ("0", "No_enzyme", "0", "-", "-")
TRYPSIN = ("1", "Trypsin", "1", "KR", "P")
LYS_C = ("2", "Lys_C", "1", "K", "P")


class ScriptedEditor:
    """
    Stand-in for the catalogue editor dialog.

    Returns the queued results in order and records how often it was opened.
    An optional hook runs while the "dialog" is open.
    """

    def __init__(self, *results: EditorResult):
        self.results = list(results)
        self.calls = 0
        self.while_open = None

    def queue(self, result: EditorResult):
        self.results.append(result)

    def __call__(self) -> EditorResult:
        self.calls += 1
        if self.while_open is not None:
            self.while_open()
        return self.results.pop(0)


class NotifyCounter:
    """Counts notify_dirty() calls while mirroring them into a DirtyFlag."""

    def __init__(self):
        self.flag = DirtyFlag()
        self.calls = 0

    def __call__(self):
        self.calls += 1
        self.flag.notify_dirty()


@pytest.fixture
def sample_records():
    """
    Three-enzyme catalogue.

    Returns:
        Tuple of catalogue records.
    """
    return (NO_ENZYME, TRYPSIN, LYS_C)


@pytest.fixture
def search_settings(sample_records) -> SearchSettings:
    """
    Search settings over the three-enzyme catalogue.

    Returns:
        SearchSettings with Trypsin as search enzyme and No_enzyme as sample enzyme.
    """
    return SearchSettings(
        search_enzyme_number=1,
        sample_enzyme_number=0,
        allowed_missed_cleavages=2,
        enzyme_termini=2,
        enzyme_info=serialize_records(sample_records),
    )


@pytest.fixture
def store(sample_records) -> ReferenceDatasetStore:
    """Store loaded with the three-enzyme catalogue."""
    store = ReferenceDatasetStore()
    store.load(sample_records)
    return store


@pytest.fixture
def editor() -> ScriptedEditor:
    """Catalogue editor with no queued results."""
    return ScriptedEditor()


@pytest.fixture
def notify() -> NotifyCounter:
    """notify_dirty() hook that counts calls."""
    return NotifyCounter()


@pytest.fixture
def synchronizer(search_settings, store, editor, notify) -> OptionSynchronizer:
    """
    Synchronizer with the standard enzyme page lists.

    Returns:
        OptionSynchronizer over the three-enzyme catalogue.
    """
    return create_enzyme_synchronizer(search_settings, editor, notify, store=store)
