"""
Tests for the enzyme catalogue store and record codec.
"""

import pytest

from cometsettings.core.models import FormatError
from cometsettings.core.reference_store import ReferenceDatasetStore
from cometsettings.infrastructure.record_codec import (
    check_arity,
    parse_records,
    serialize_records,
)

from conftest import LYS_C, NO_ENZYME, TRYPSIN


class TestReferenceDatasetStore:
    """Tests for ReferenceDatasetStore."""

    def test_load_and_current(self, sample_records):
        """Test that loaded records are returned in order."""
        store = ReferenceDatasetStore()
        store.load(list(sample_records))

        assert store.current() == (NO_ENZYME, TRYPSIN, LYS_C)
        assert store.generation == 1
        assert not store.is_modified()

    def test_load_rejects_mixed_arity(self):
        """Test that records with a different field count are rejected."""
        store = ReferenceDatasetStore()

        with pytest.raises(FormatError, match="Record 1"):
            store.load([NO_ENZYME, ("1", "Trypsin", "1", "KR")])

    def test_load_empty(self):
        """Test that an empty catalogue is accepted."""
        store = ReferenceDatasetStore()
        store.load([])

        assert store.current() == ()

    def test_replace_all_reports_change(self, store):
        """Test that a different catalogue replaces the old one."""
        assert store.replace_all([TRYPSIN, LYS_C]) is True

        assert store.current() == (TRYPSIN, LYS_C)
        assert store.generation == 2
        assert store.is_modified()

    def test_replace_all_identical_is_no_change(self, store, sample_records):
        """Test that an equal catalogue is not a change."""
        assert store.replace_all([list(record) for record in sample_records]) is False
        assert store.generation == 1

    def test_replace_all_is_order_sensitive(self, store):
        """Test that reordering records counts as a change."""
        assert store.replace_all([TRYPSIN, NO_ENZYME, LYS_C]) is True

    def test_replace_all_rejects_mixed_arity(self, store, sample_records):
        """Test that a failed replacement leaves the catalogue unchanged."""
        with pytest.raises(FormatError):
            store.replace_all([TRYPSIN, ("2", "Lys_C")])

        assert store.current() == sample_records
        assert store.generation == 1

    def test_listeners_notified_on_change_only(self, store):
        """Test that listeners only hear about effective replacements."""
        seen = []
        store.add_listener(seen.append)

        store.replace_all([NO_ENZYME, TRYPSIN, LYS_C])
        store.replace_all([TRYPSIN])

        assert seen == [(TRYPSIN,)]

        store.remove_listener(seen.append)
        store.replace_all([LYS_C])
        assert seen == [(TRYPSIN,)]

    def test_mark_persisted(self, store):
        """Test that the persisted baseline follows mark_persisted()."""
        store.replace_all([TRYPSIN])
        store.mark_persisted()
        assert not store.is_modified()

        store.replace_all([NO_ENZYME, TRYPSIN, LYS_C])
        assert store.is_modified()


class TestRecordCodec:
    """Tests for the delimited record format."""

    def test_parse_records(self):
        """Test that rows are split on commas without any unquoting."""
        records = parse_records(["1,Trypsin,1,KR,P", "2,Trypsin/P,1,KR,-"])

        assert records == (TRYPSIN, ("2", "Trypsin/P", "1", "KR", "-"))

    def test_parse_records_mixed_arity(self):
        """Test that inconsistent rows raise FormatError."""
        with pytest.raises(FormatError):
            parse_records(["1,Trypsin,1,KR,P", "2,Lys_C,1,K"])

    def test_serialize_records(self, sample_records):
        """Test that records serialize to the stored row shape."""
        assert serialize_records(sample_records) == ["0,No_enzyme,0,-,-", "1,Trypsin,1,KR,P", "2,Lys_C,1,K,P"]

    def test_check_arity_returns_tuples(self):
        """Test that lists are normalized to tuples."""
        assert check_arity([["a", "b"], ["c", "d"]]) == (("a", "b"), ("c", "d"))
