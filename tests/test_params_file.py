"""
Tests for comet.params import and export.
"""

import pytest

from cometsettings.config.settings import SearchSettings
from cometsettings.core.enzyme_config import DEFAULT_ENZYME_INFO
from cometsettings.core.models import EditorResult, FormatError
from cometsettings.core.option_sync import SAMPLE_ENZYME_SLOT, SEARCH_ENZYME_SLOT, create_enzyme_synchronizer
from cometsettings.infrastructure.params_file import (
    ENZYME_SECTION,
    format_enzyme_row,
    parse_enzyme_row,
    parse_params_text,
    read_params_file,
    render_params,
    write_params_file,
)

from conftest import TRYPSIN


COMET_PARAMS = """\
# comet_version 2014.02 rev. 0
database_name = /data/human.fasta
decoy_search = 0                       # 0=no (default), 1=concatenated search, 2=separate search

#
# search enzyme
#
search_enzyme_number = 3               # choose from list at end of this params file
num_enzyme_termini = 1                 # valid values are 1 (semi-digested), 2 (fully digested, default), 8 N-term, 9 C-term
allowed_missed_cleavage = 1            # maximum value is 5; for enzyme search

sample_enzyme_number = 1               # Sample enzyme which is possibly different than the one applied to the search.

#
# COMET_ENZYME_INFO _must_ be at the end of this parameters file
#
[COMET_ENZYME_INFO]
0.  No_enzyme              0      -           -
1.  Trypsin                1      KR          P
2.  Trypsin/P              1      KR          -
3.  Lys_C                  1      K           P
"""


class TestParseParams:
    """Tests for reading params files."""

    def test_parse_enzyme_keys_and_catalogue(self):
        """Test that the enzyme keys and block are read."""
        search = parse_params_text(COMET_PARAMS)

        assert search.search_enzyme_number == 3
        assert search.sample_enzyme_number == 1
        assert search.enzyme_termini == 1
        assert search.allowed_missed_cleavages == 1
        assert search.enzyme_info == [
            "0,No_enzyme,0,-,-",
            "1,Trypsin,1,KR,P",
            "2,Trypsin/P,1,KR,-",
            "3,Lys_C,1,K,P",
        ]

    def test_missing_keys_keep_defaults(self):
        """Test that a file without enzyme settings yields the defaults."""
        search = parse_params_text("database_name = /data/yeast.fasta\n")

        assert search == SearchSettings()
        assert search.enzyme_info == DEFAULT_ENZYME_INFO

    def test_invalid_values_are_normalized(self):
        """Test that unsupported termini and missed cleavages are coerced."""
        search = parse_params_text("num_enzyme_termini = 4\nallowed_missed_cleavage = 12\n")

        assert search.enzyme_termini == 2
        assert search.allowed_missed_cleavages == 5

    def test_non_integer_value(self):
        """Test that a non-numeric enzyme key is a format error."""
        with pytest.raises(FormatError, match="Line 1"):
            parse_params_text("search_enzyme_number = trypsin\n")

    def test_missing_enzyme_definition(self):
        """Test that selecting an undefined enzyme is rejected."""
        text = "search_enzyme_number = 7\n" + ENZYME_SECTION + "\n0.  No_enzyme  0  -  -\n1.  Trypsin  1  KR  P\n"

        with pytest.raises(FormatError, match="missing definition"):
            parse_params_text(text)

    def test_one_based_catalogue_is_renumbered(self):
        """Test that enzyme keys follow their enzyme when rows are not numbered from 0."""
        text = (
            "search_enzyme_number = 1\n"
            "sample_enzyme_number = 3\n"
            + ENZYME_SECTION + "\n"
            "1.  Trypsin  1  KR  P\n"
            "2.  Lys_C    1  K   P\n"
            "3.  Asp_N    0  D   -\n"
        )

        search = parse_params_text(text)

        assert search.search_enzyme_number == 0
        assert search.sample_enzyme_number == 2
        assert search.enzyme_info == ["0,Trypsin,1,KR,P", "1,Lys_C,1,K,P", "2,Asp_N,0,D,-"]

        sync = create_enzyme_synchronizer(search, lambda: EditorResult(committed=False), lambda: None)
        assert sync.slot(SEARCH_ENZYME_SLOT).displayed_label == "Trypsin (KR/P)"
        assert sync.slot(SAMPLE_ENZYME_SLOT).displayed_label == "Asp_N (D/-)"

    def test_parse_enzyme_row(self):
        """Test parsing a single catalogue row."""
        assert parse_enzyme_row("1.  Trypsin                1      KR          P") == TRYPSIN

        with pytest.raises(FormatError):
            parse_enzyme_row("1.  Trypsin  1  KR")
        with pytest.raises(FormatError):
            parse_enzyme_row("x.  Trypsin  1  KR  P")

    def test_read_missing_file(self, tmp_path):
        """Test that reading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_params_file(tmp_path / "comet.params")


class TestRenderParams:
    """Tests for writing params files."""

    def test_format_enzyme_row_matches_comet_layout(self):
        """Test that rows are aligned like the ones Comet generates."""
        expected = "1.  Trypsin" + " " * 16 + "1" + " " * 6 + "KR" + " " * 10 + "P"
        assert format_enzyme_row(TRYPSIN) == expected
        assert format_enzyme_row(("10", "Chymotrypsin", "1", "FWYL", "P")).startswith("10. Chymotrypsin")

    def test_render_without_template(self):
        """Test that a standalone file ends with the enzyme block."""
        text = render_params(SearchSettings(search_enzyme_number=2))
        lines = text.splitlines()

        assert lines[-12] == ENZYME_SECTION
        assert lines[-1].startswith("10. Chymotrypsin")
        assert parse_params_text(text) == SearchSettings(search_enzyme_number=2)

    def test_render_updates_template_in_place(self):
        """Test that other lines survive and the enzyme keys are rewritten."""
        search = parse_params_text(COMET_PARAMS)
        search.search_enzyme_number = 0
        search.allowed_missed_cleavages = 3
        search.enzyme_info = search.enzyme_info[:3]

        text = render_params(search, COMET_PARAMS)

        assert "database_name = /data/human.fasta" in text
        assert "decoy_search = 0" in text
        assert text.count(ENZYME_SECTION) == 1
        assert text.count("COMET_ENZYME_INFO _must_") == 1
        assert "Lys_C" not in text

        reparsed = parse_params_text(text)
        assert reparsed.search_enzyme_number == 0
        assert reparsed.allowed_missed_cleavages == 3
        assert reparsed.sample_enzyme_number == 1
        assert reparsed.enzyme_termini == 1

    def test_render_appends_missing_keys(self):
        """Test that keys absent from the template are added."""
        text = render_params(SearchSettings(sample_enzyme_number=4), "database_name = /data/x.fasta\n")

        assert "sample_enzyme_number = 4" in text
        assert parse_params_text(text).sample_enzyme_number == 4

    def test_write_and_read_file(self, tmp_path):
        """Test exporting to a new file and importing it back."""
        path = tmp_path / "comet.params"
        search = SearchSettings(search_enzyme_number=5, enzyme_termini=9)

        write_params_file(path, search)

        assert read_params_file(path) == search
        assert not (tmp_path / "comet.params.tmp").exists()
