"""
Input sniffing helpers shared by the parsers.

Each helper is a pure function of the slice of input it inspects, so the
header and delimiter heuristics can be tested on their own.
"""

import math
import re
from typing import Any

HEADER_KEYWORDS = ("name", "card", "quantity")

# Largest quantity a 32-bit INTEGER column holds
MAX_QUANTITY = 2**31 - 1

# Leading integer: "3" -> 3, " 2abc" -> 2, "-1" -> -1
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# One quote character at either end: "\"Bolt\"" -> "Bolt"
_EDGE_QUOTES = re.compile(r"^[\"']|[\"']$")


def split_lines(text: str) -> list[str]:
    """
    Split raw input into lines for 1-based numbering.

    The whole input is trimmed first so leading blank lines do not shift
    numbering. Windows line endings are tolerated.
    """
    return [line.rstrip("\r") for line in text.strip().split("\n")]


def is_header_row(line: str) -> bool:
    """True if a CSV line looks like a column header rather than a card."""
    lowered = line.lower()
    return any(keyword in lowered for keyword in HEADER_KEYWORDS)


def detect_delimiter(line: str) -> str:
    """Tab if the line contains one, comma otherwise."""
    return "\t" if "\t" in line else ","


def split_columns(line: str) -> list[str]:
    return line.split(detect_delimiter(line))


def strip_quotes(value: str) -> str:
    """Trim and remove one surrounding quote character from each end."""
    return _EDGE_QUOTES.sub("", value.strip())


def parse_quantity(raw: Any) -> int:
    """
    Coerce a raw quantity to int.

    Anything that does not parse becomes 0. Callers check the result with
    is_valid_quantity, so unparseable input takes the same Invalid
    quantity path as an out-of-range number.
    """
    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else 0
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        return int(match.group(1)) if match else 0
    return 0


def optional_text(raw: Any) -> str | None:
    """Normalize an optional text field: blank or missing becomes None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return str(raw)
    if not isinstance(raw, str):
        return None
    value = strip_quotes(raw)
    return value or None


def is_valid_quantity(quantity: int) -> bool:
    """Positive and small enough to store."""
    return 0 < quantity <= MAX_QUANTITY
