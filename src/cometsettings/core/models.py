"""
Core domain models for the enzyme settings page.

This module contains pure data models shared by the enzyme catalogue store
and the option synchronizer. These models are GUI-agnostic and should not
import any UI frameworks.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union


ReferenceRecord = tuple[str, ...]
"""One catalogue row: field 0 is the enzyme number, the rest are attributes."""

ReferenceDataset = tuple[ReferenceRecord, ...]


class FormatError(ValueError):
    """Raised when catalogue records cannot be parsed or have mixed arity."""


class InvariantError(RuntimeError):
    """Raised when a displayed label has no key in a closed label mapping."""


@dataclass(frozen=True)
class EditorResult:
    """
    Outcome of one invocation of the catalogue editor.

    The editor keeps no state between invocations; everything the caller
    needs to know is carried here.
    """

    committed: bool
    """True if the user accepted the dialog, False if it was dismissed."""

    changed: bool = False
    """True if the user edited the catalogue before accepting."""

    records: Optional[ReferenceDataset] = None
    """The edited catalogue, present when committed."""


@dataclass(frozen=True)
class Selected:
    """A normal list entry was chosen."""

    index: int


@dataclass(frozen=True)
class EditRequested:
    """The trailing edit entry was chosen; the catalogue editor must open."""


SelectionResult = Union[Selected, EditRequested]


class DirtyFlag:
    """
    Session-scoped "unsaved changes" flag held by the owning context.

    The synchronizer only ever sets it. Clearing it after the settings have
    been written is the owner's job.
    """

    def __init__(self):
        self._is_set = False

    @property
    def is_set(self) -> bool:
        return self._is_set

    def notify_dirty(self) -> None:
        self._is_set = True

    def clear(self) -> None:
        self._is_set = False

    def __bool__(self) -> bool:
        return self._is_set


class EnzymeTermini(IntEnum):
    """Number of enzymatic termini required of a candidate peptide."""

    FULLY_DIGESTED = 2
    SEMI_DIGESTED = 1
    N_TERM = 8
    C_TERM = 9

    @property
    def label(self) -> str:
        """Display label shown in the termini list."""
        return _TERMINI_LABELS[self]

    @classmethod
    def label_mapping(cls) -> dict[int, str]:
        """
        Get the key to label mapping in display order.

        Returns:
            Dictionary of persisted key to display label.
        """
        return {member.value: member.label for member in cls}


_TERMINI_LABELS = {
    EnzymeTermini.FULLY_DIGESTED: "Fully-digested",
    EnzymeTermini.SEMI_DIGESTED: "Semi-digested",
    EnzymeTermini.N_TERM: "N-term",
    EnzymeTermini.C_TERM: "C-term",
}
