"""
Parsers for bulk card import formats.

Supports:
- CSV: "Card Name",Quantity,Set,Set Number (comma or tab separated)
- JSON: array of {"cardName"|"name", "quantity"|"count", ...} objects
- Deck list: "3 Nu Gundam" or "2x Nu Gundam", with // and # comments
- MTGA: "3 Nu Gundam (GD01) 012", with Deck/Sideboard section headers

Every counted line produces exactly one CardEntry or one ParseError, in
input order. Parsers never raise on bad input; parse_import turns any
unexpected failure into a single file-level ParseError.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any, Literal

from cardport.models.entries import CardEntry, ParseError, ParseResult
from cardport.models.failure import UnsupportedFormatError
from cardport.parsers.heuristics import (
    is_header_row,
    is_valid_quantity,
    optional_text,
    parse_quantity,
    split_columns,
    split_lines,
    strip_quotes,
)

logger = logging.getLogger(__name__)

ImportFormat = Literal["csv", "json", "decklist", "mtga"]

IMPORT_FORMATS: tuple[str, ...] = ("csv", "json", "decklist", "mtga")

# Pattern: "4 Nu Gundam" or "4x Nu Gundam" or "4X Nu Gundam"
# Groups: (quantity, card_name)
DECKLIST_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)

# Pattern: "4 Nu Gundam (GD01) 012" or "4 Card (SET) 290a"
# Groups: (quantity, card_name, set_code, collector_number)
MTGA_FULL_PATTERN = re.compile(r"^(\d+)\s+(.+?)\s+\(([A-Za-z0-9]+)\)\s+(\S+)$")

# Section headers in MTGA exports
SECTION_HEADERS = frozenset({"deck", "sideboard", "commander", "companion"})

DECKLIST_SUGGESTION = 'Use format like "3 Card Name" or "2x Card Name"'
MTGA_SUGGESTION = 'Use format like "3 Card Name (SET) 123"'


def parse_csv(text: str, max_lines: int | None = None) -> list[ParseResult]:
    """
    Parse CSV or tab-separated card rows.

    Columns: name, quantity, set name (optional), set number (optional).
    A first line mentioning name/card/quantity is treated as a header.

    Args:
        text: Raw CSV text
        max_lines: Only scan this many lines after the header (preview)
    """
    lines = split_lines(text)
    start = 1 if lines and is_header_row(lines[0]) else 0
    end = len(lines) if max_lines is None else min(len(lines), start + max_lines)

    results: list[ParseResult] = []
    for index in range(start, end):
        line_no = index + 1
        line = lines[index].strip()
        if not line:
            continue

        parts = split_columns(line)
        if len(parts) < 2:
            results.append(
                ParseError(line_no, "Insufficient columns", "name and quantity required")
            )
            continue

        card_name = strip_quotes(parts[0])
        quantity = parse_quantity(parts[1].strip())

        if not card_name:
            results.append(ParseError(line_no, "Missing card name"))
            continue
        if not is_valid_quantity(quantity):
            results.append(ParseError(line_no, "Invalid quantity", "must be positive"))
            continue

        results.append(
            CardEntry(
                source_line=line_no,
                card_name=card_name,
                quantity=quantity,
                set_name=optional_text(parts[2]) if len(parts) > 2 else None,
                set_number=optional_text(parts[3]) if len(parts) > 3 else None,
            )
        )

    return results


def parse_json(data: Any, max_lines: int | None = None) -> list[ParseResult]:
    """
    Parse a JSON array of card objects.

    Accepts raw JSON text or an already-decoded value. Element i maps to
    line i + 1. Field aliases: cardName/name, quantity/count, setName/set,
    setNumber/number, cardId/id.

    Raises:
        json.JSONDecodeError: If text is not valid JSON (parse_import
        converts this into a file-level ParseError)
    """
    if isinstance(data, (str, bytes)):
        data = json.loads(data)

    if not isinstance(data, list):
        return [ParseError(1, "Data must be an array of card objects")]

    items = data if max_lines is None else data[:max_lines]

    results: list[ParseResult] = []
    for index, item in enumerate(items):
        line_no = index + 1
        if not isinstance(item, dict):
            results.append(ParseError(line_no, "Missing card name in object"))
            continue

        raw_name = _first_present(item, "cardName", "name")
        card_name = raw_name.strip() if isinstance(raw_name, str) else ""
        quantity = parse_quantity(_first_present(item, "quantity", "count"))

        if not card_name:
            results.append(ParseError(line_no, "Missing card name in object"))
            continue
        if not is_valid_quantity(quantity):
            results.append(ParseError(line_no, "Invalid quantity in object"))
            continue

        results.append(
            CardEntry(
                source_line=line_no,
                card_name=card_name,
                quantity=quantity,
                set_name=optional_text(_first_present(item, "setName", "set")),
                set_number=optional_text(_first_present(item, "setNumber", "number")),
                card_id=optional_text(_first_present(item, "cardId", "id")),
            )
        )

    return results


def parse_decklist(text: str, max_lines: int | None = None) -> list[ParseResult]:
    """
    Parse a "quantity name" deck list.

    Blank lines and lines starting with // or # are skipped without an
    entry or an error.
    """
    lines = split_lines(text)
    if max_lines is not None:
        lines = lines[:max_lines]

    results: list[ParseResult] = []
    for index, raw_line in enumerate(lines):
        line_no = index + 1
        line = raw_line.strip()
        if not line or line.startswith("//") or line.startswith("#"):
            continue

        match = DECKLIST_PATTERN.match(line)
        if not match:
            results.append(ParseError(line_no, "Invalid format", DECKLIST_SUGGESTION))
            continue

        results.append(_entry_or_error(line_no, match.group(1), match.group(2)))

    return results


def parse_mtga(text: str, max_lines: int | None = None) -> list[ParseResult]:
    """
    Parse an MTGA-style export: "3 Card Name (SET) 123".

    Lines without set info fall back to the deck list form. Section headers
    (Deck, Sideboard, ...) and blank lines are skipped.
    """
    lines = split_lines(text)
    if max_lines is not None:
        lines = lines[:max_lines]

    results: list[ParseResult] = []
    for index, raw_line in enumerate(lines):
        line_no = index + 1
        line = raw_line.strip()
        if not line or line.lower() in SECTION_HEADERS:
            continue

        match = MTGA_FULL_PATTERN.match(line)
        if match:
            quantity, name, set_code, collector_number = match.groups()
            results.append(
                _entry_or_error(line_no, quantity, name, set_code.upper(), collector_number)
            )
            continue

        match = DECKLIST_PATTERN.match(line)
        if match:
            results.append(_entry_or_error(line_no, match.group(1), match.group(2)))
            continue

        results.append(ParseError(line_no, "Invalid format", MTGA_SUGGESTION))

    return results


_PARSERS: dict[str, Callable[[Any, int | None], list[ParseResult]]] = {
    "csv": parse_csv,
    "json": parse_json,
    "decklist": parse_decklist,
    "mtga": parse_mtga,
}


def normalize_format(format_name: str) -> ImportFormat:
    """
    Validate and lowercase a format identifier.

    Raises:
        UnsupportedFormatError: For identifiers no parser handles
    """
    normalized = format_name.strip().lower()
    if normalized not in _PARSERS:
        raise UnsupportedFormatError(format_name, IMPORT_FORMATS)
    return normalized  # type: ignore[return-value]


def parse_import(
    format_name: str, data: Any, max_lines: int | None = None
) -> list[ParseResult]:
    """
    Parse import data in the given format.

    This is the parse boundary: bad input never raises past it. Any failure
    while parsing (malformed JSON, wrong input type) becomes a single
    ParseError at line 1 and no entries.

    Args:
        format_name: One of IMPORT_FORMATS (case-insensitive)
        data: Raw text, or an already-decoded JSON value for "json"
        max_lines: Limit the scan to this many source lines (preview)

    Returns:
        CardEntry and ParseError values in input order

    Raises:
        UnsupportedFormatError: If format_name is unknown (caller error)
    """
    parser = _PARSERS[normalize_format(format_name)]

    try:
        results = parser(data, max_lines)
    except Exception as e:
        logger.warning(
            "import_parse_failed",
            extra={"format": format_name, "error_type": type(e).__name__},
        )
        return [ParseError(1, f"Parse error: {e}")]

    logger.debug(
        "import_parsed",
        extra={"format": format_name, "result_count": len(results)},
    )
    return results


def _first_present(item: dict[str, Any], *keys: str) -> Any:
    """Value of the first key that is present and not null or blank."""
    for key in keys:
        value = item.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def _entry_or_error(
    line_no: int,
    raw_quantity: str,
    raw_name: str,
    set_name: str | None = None,
    set_number: str | None = None,
) -> ParseResult:
    quantity = parse_quantity(raw_quantity)
    card_name = raw_name.strip()

    if not is_valid_quantity(quantity):
        return ParseError(line_no, "Invalid quantity")
    if not card_name:
        return ParseError(line_no, "Missing card name")

    return CardEntry(
        source_line=line_no,
        card_name=card_name,
        quantity=quantity,
        set_name=set_name,
        set_number=set_number,
    )
