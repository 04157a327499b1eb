"""
Enzyme record parsing and serialization.

Catalogue rows are stored in the settings file as comma-delimited strings,
for example ``"1,Trypsin,1,KR,P"``. Fields are taken verbatim: there is no
quoting or escaping, so a field must never contain a comma.
"""

from typing import Iterable

from ..core.models import FormatError, ReferenceDataset, ReferenceRecord
from .logging_config import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = ","


def check_arity(records: Iterable[ReferenceRecord]) -> ReferenceDataset:
    """
    Ensure every record has the same number of fields as the first one.

    Args:
        records: Records to check.

    Returns:
        The records as a tuple of tuples.

    Raises:
        FormatError: If a record's arity differs from the first record's.
    """
    dataset = tuple(tuple(record) for record in records)
    if not dataset:
        return dataset

    arity = len(dataset[0])
    for position, record in enumerate(dataset):
        if len(record) != arity:
            raise FormatError(
                f"Record {position} has {len(record)} fields, expected {arity}: {record!r}"
            )
    return dataset


def parse_record(row: str) -> ReferenceRecord:
    """
    Split one delimited row into its fields.

    Args:
        row: Comma-delimited row.

    Returns:
        Tuple of field strings.
    """
    return tuple(row.split(FIELD_SEPARATOR))


def parse_records(rows: Iterable[str]) -> ReferenceDataset:
    """
    Parse delimited rows into a catalogue.

    Args:
        rows: Comma-delimited rows, as stored in the settings file.

    Returns:
        Parsed records in their original order.

    Raises:
        FormatError: If the rows do not all have the same number of fields.
    """
    dataset = check_arity(parse_record(row) for row in rows)
    logger.debug(f"Parsed {len(dataset)} enzyme records")
    return dataset


def serialize_record(record: ReferenceRecord) -> str:
    """Join a record's fields back into one delimited row."""
    return FIELD_SEPARATOR.join(record)


def serialize_records(records: Iterable[ReferenceRecord]) -> list[str]:
    """
    Serialize a catalogue to the delimited-row shape used for persistence.

    Args:
        records: Records to serialize.

    Returns:
        List of comma-delimited rows.
    """
    return [serialize_record(record) for record in records]
