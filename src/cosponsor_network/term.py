"""Assembly term resolution.

Every member, bill and co-sponsorship belongs to exactly one assembly term
(the "age" of the National Assembly, e.g. the 22nd assembly seated in 2024).
Record Store files for a term live under one directory:

  data/22nd_assembly/22nd_assembly_members.csv
  data/22nd_assembly/22nd_assembly_bills.csv
  data/22nd_assembly/22nd_assembly_cosponsors.csv

This module encapsulates that naming so the store and CLI agree on it.
"""

from dataclasses import dataclass
from pathlib import Path

from cosponsor_network.config import CURRENT_TERM, DATA_ROOT
from cosponsor_network.errors import ValidationError

# The 1st assembly opened in 1948; since the 13th, terms are four years apart.
_FIRST_REGULAR_TERM = 13
_FIRST_REGULAR_YEAR = 1988


def _ordinal(n: int) -> str:
    """Return the ordinal string for an integer (1st, 2nd, 3rd, 4th, ..., 22nd)."""
    if 11 <= (n % 100) <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def parse_term_number(text: str | None) -> int | None:
    """Positive term number from text, or None when the text is not one.

    Only decimal digits count, so superscripts such as "²" are rejected.
    """
    if text is None:
        return None
    text = text.strip()
    if not text.isdecimal():
        return None
    number = int(text)
    return number if number >= 1 else None


@dataclass(frozen=True)
class Term:
    """One assembly term and its on-disk naming."""

    number: int

    @property
    def is_current(self) -> bool:
        return self.number == CURRENT_TERM

    @property
    def start_year(self) -> int | None:
        """Year the term was seated, for terms on the regular four-year cycle."""
        if self.number < _FIRST_REGULAR_TERM:
            return None
        return _FIRST_REGULAR_YEAR + 4 * (self.number - _FIRST_REGULAR_TERM)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. '22nd Assembly (2024-2028)'"""
        name = f"{_ordinal(self.number)} Assembly"
        if self.start_year is None:
            return name
        return f"{name} ({self.start_year}-{self.start_year + 4})"

    @property
    def output_name(self) -> str:
        """Filesystem-safe name for data dirs/files, e.g. '22nd_assembly'"""
        return f"{_ordinal(self.number)}_assembly"

    def data_dir(self, root: Path | None = None) -> Path:
        return (root or DATA_ROOT) / self.output_name

    @classmethod
    def parse(cls, value: object = None) -> "Term":
        """Create a term from a request parameter.

        ``None`` and the empty string resolve to the current term. Integers and
        decimal digit strings are accepted; anything else is a bad request.
        """
        if value is None or value == "":
            return cls(CURRENT_TERM)
        if isinstance(value, bool):
            raise ValidationError(f"Unrecognized term: {value!r}")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and value.strip().isdecimal():
            number = int(value.strip())
        else:
            raise ValidationError(f"Unrecognized term: {value!r}")
        if number < 1:
            raise ValidationError(f"Term must be a positive integer, got {number}")
        return cls(number)
