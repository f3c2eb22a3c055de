"""
Import preview.

A preview is a bounded prefix scan: only the first N source lines are
parsed, and every error inside that window is reported. A burst of errors
at the top of a large paste therefore shows up immediately, without
parsing the rest of the input.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from cardport.models.entries import CardEntry, ParseError, ParseResult
from cardport.parsers.formats import parse_import


@dataclass
class ImportPreview:
    """UI-safe subset of a parse."""

    entries: list[CardEntry] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        """True if the scanned window parsed cleanly and found cards."""
        return not self.errors and bool(self.entries)


def preview_results(results: Sequence[ParseResult], max_items: int) -> ImportPreview:
    """
    Window an already-complete parse down to a preview.

    Each counted line produced exactly one result, so the first `max_items`
    results are the first `max_items` counted lines. Use this when the
    whole input was parsed for validation but only a preview is displayed.
    """
    _check_limit(max_items)
    window = results[:max_items]
    return ImportPreview(
        entries=[r for r in window if isinstance(r, CardEntry)],
        errors=[r for r in window if isinstance(r, ParseError)],
    )


def build_preview(format_name: str, data: Any, max_items: int) -> ImportPreview:
    """
    Parse only the first `max_items` source lines and preview them.

    For CSV the window starts after a detected header row; for JSON it
    covers the first `max_items` array elements. File-level failures
    (malformed JSON) are always reported.

    Raises:
        UnsupportedFormatError: If format_name is unknown
    """
    _check_limit(max_items)
    results = parse_import(format_name, data, max_lines=max_items)
    return ImportPreview(
        entries=[r for r in results if isinstance(r, CardEntry)][:max_items],
        errors=[r for r in results if isinstance(r, ParseError)],
    )


def _check_limit(max_items: int) -> None:
    if max_items < 0:
        raise ValueError(f"max_items must be >= 0, got {max_items}")
