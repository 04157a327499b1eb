"""
Enzyme catalogue configuration.

This module provides the default enzyme catalogue shipped with Comet and the
rules for turning catalogue records into list labels. Records use the field
layout ``number, name, offset, break residues, no-break residues``.
"""

from typing import Optional, Sequence

from .models import EnzymeTermini, ReferenceRecord

# Field positions within a catalogue record
FIELD_NUMBER = 0
FIELD_NAME = 1
FIELD_OFFSET = 2
FIELD_BREAK_AA = 3
FIELD_NO_BREAK_AA = 4

ENZYME_RECORD_ARITY = 5

# Default catalogue, matching the [COMET_ENZYME_INFO] block Comet writes
DEFAULT_ENZYME_INFO = [
    "0,No_enzyme,0,-,-",
    "1,Trypsin,1,KR,P",
    "2,Trypsin/P,1,KR,-",
    "3,Lys_C,1,K,P",
    "4,Lys_N,0,K,-",
    "5,Arg_C,1,R,P",
    "6,Asp_N,0,D,-",
    "7,CNBr,1,M,-",
    "8,Glu_C,1,DE,P",
    "9,PepsinA,1,FL,P",
    "10,Chymotrypsin,1,FWYL,P",
]

EDIT_LIST_LABEL = "<Edit List...>"

MAX_MISSED_CLEAVAGES = 5

# For this list the index is the number of allowed missed cleavages
MISSED_CLEAVAGE_CHOICES = [str(n) for n in range(MAX_MISSED_CLEAVAGES + 1)]

DEFAULT_ENZYME_TERMINI = EnzymeTermini.FULLY_DIGESTED


def enzyme_label(record: ReferenceRecord) -> str:
    """
    Build the list label for an enzyme record.

    Args:
        record: Catalogue record.

    Returns:
        Label such as ``"Trypsin (KR/P)"``.
    """
    return f"{record[FIELD_NAME]} ({record[FIELD_BREAK_AA]}/{record[FIELD_NO_BREAK_AA]})"


def enzyme_identity(record: ReferenceRecord) -> tuple[str, ...]:
    """
    Get the fields that identify an enzyme across catalogue edits.

    The enzyme number is the record's position and is rewritten whenever
    rows are added or removed, so only the remaining fields are compared.
    """
    return tuple(record[FIELD_NAME:])


def renumber_records(records: Sequence[ReferenceRecord]) -> tuple[ReferenceRecord, ...]:
    """Rewrite each record's enzyme number to its position in the catalogue."""
    return tuple((str(index), *record[FIELD_NAME:]) for index, record in enumerate(records))


def normalize_enzyme_termini(value: int) -> int:
    """
    Coerce a termini setting to a supported value.

    Comet treats anything other than 1, 8 or 9 as fully digested.

    Args:
        value: Raw termini value.

    Returns:
        A valid EnzymeTermini value.
    """
    try:
        return EnzymeTermini(value).value
    except ValueError:
        return DEFAULT_ENZYME_TERMINI.value


def clamp_missed_cleavages(value: int) -> int:
    """Clamp the allowed missed cleavages to the range the list offers."""
    return max(0, min(int(value), MAX_MISSED_CLEAVAGES))


def find_enzyme(records: Sequence[ReferenceRecord], number: int) -> Optional[ReferenceRecord]:
    """
    Find the catalogue record with the given enzyme number.

    Args:
        records: Catalogue records.
        number: Enzyme number (field 0).

    Returns:
        The first matching record, or None if the number is not defined.
    """
    for record in records:
        try:
            if int(record[FIELD_NUMBER].rstrip('.')) == number:
                return record
        except ValueError:
            continue
    return None


def is_no_enzyme(record: ReferenceRecord) -> bool:
    """
    Check whether a record describes a non-specific (no enzyme) search.

    Args:
        record: Catalogue record.

    Returns:
        True if both the break and no-break residues are ``-``.
    """
    return record[FIELD_BREAK_AA].startswith('-') and record[FIELD_NO_BREAK_AA].startswith('-')


def describe_search_enzyme(record: ReferenceRecord, missed_cleavages: int, termini: int) -> str:
    """
    Describe the search enzyme the way Comet prints it in its output header.

    Args:
        record: Search enzyme record.
        missed_cleavages: Allowed missed cleavages.
        termini: Enzyme termini setting.

    Returns:
        Text such as ``"Enzyme:Trypsin (2)"`` or ``"Enzyme:Trypsin (2:1)"``.
    """
    name = record[FIELD_NAME]
    if is_no_enzyme(record):
        return f"Enzyme:{name}"

    suffix = ""
    if termini != EnzymeTermini.FULLY_DIGESTED:
        suffix = f":{termini}"
    return f"Enzyme:{name} ({missed_cleavages}{suffix})"
