"""
Parse result models.

A parser turns every counted input line into exactly one of:
- CardEntry: a validated, normalized card record
- ParseError: a line-level (or file-level) diagnostic

INVARIANTS:
- A CardEntry always has a non-blank name and a positive quantity
- line == 0 on a ParseError means "file-level", not a specific line
- All models are frozen (immutable after construction)
"""

from collections.abc import Iterable
from dataclasses import dataclass

FILE_LEVEL_LINE = 0


@dataclass(frozen=True, slots=True)
class CardEntry:
    """
    One validated card record parsed from one input line or object.

    Attributes:
        source_line: 1-based position in the input, used for diagnostics
        card_name: Card name as written by the user (trimmed)
        quantity: Number of copies, always > 0
        set_name: Set name or code, if the line carried one
        set_number: Collector number within the set, if present
        card_id: Explicit catalog id, if present (JSON imports)
    """

    source_line: int
    card_name: str
    quantity: int
    set_name: str | None = None
    set_number: str | None = None
    card_id: str | None = None

    def __post_init__(self) -> None:
        if self.source_line < 1:
            raise ValueError(f"source_line must be >= 1, got {self.source_line}")
        if not self.card_name or not self.card_name.strip():
            raise ValueError("card_name must not be empty")
        if self.quantity <= 0:
            raise ValueError(f"quantity must be positive, got {self.quantity}")


@dataclass(frozen=True, slots=True)
class ParseError:
    """A rejected input line, with a hint the user can act on."""

    line: int
    message: str
    suggestion: str | None = None

    @property
    def is_file_level(self) -> bool:
        return self.line == FILE_LEVEL_LINE


ParseResult = CardEntry | ParseError


def entries_of(results: Iterable[ParseResult]) -> list[CardEntry]:
    """Successfully parsed entries, in input order."""
    return [r for r in results if isinstance(r, CardEntry)]


def errors_of(results: Iterable[ParseResult]) -> list[ParseError]:
    """Parse errors, in input order."""
    return [r for r in results if isinstance(r, ParseError)]
