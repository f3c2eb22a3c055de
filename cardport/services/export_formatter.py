"""
Collection export formatter.

THIS MODULE HANDLES OUTPUT RENDERING ONLY.

It accepts holdings already loaded from storage and produces text in one
of the export formats. Column and field names mirror the import parsers,
so csv, json, decklist and mtga exports re-import through parse_import.

Holdings are rendered in the order given.
"""

import csv
import json
import logging
import re
from collections.abc import Callable, Sequence
from datetime import date
from io import StringIO
from typing import Any
from xml.sax.saxutils import escape, quoteattr

from cardport.models.export import (
    DEFAULT_CONDITION,
    EXPORT_FORMATS,
    ExportOptions,
    Holding,
)
from cardport.models.failure import UnsupportedFormatError

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "Card Collection"

EXPORT_CONTENT_TYPES: dict[str, str] = {
    "csv": "text/csv",
    "json": "application/json",
    "decklist": "text/plain",
    "txt": "text/plain",
    "mtga": "text/plain",
    "cockatrice": "application/xml",
}

_EXPORT_EXTENSIONS: dict[str, str] = {
    "csv": "csv",
    "json": "json",
    "decklist": "txt",
    "txt": "txt",
    "mtga": "txt",
    "cockatrice": "cod",
}


def format_export(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """
    Render holdings in the requested export format.

    `only_owned` drops zero-quantity holdings before rendering, for every
    format. Option flags a format has no column for are ignored.

    Raises:
        UnsupportedFormatError: If options.format is unknown
    """
    formatter = _FORMATTERS.get(options.format)
    if formatter is None:
        raise UnsupportedFormatError(options.format, EXPORT_FORMATS)

    rows = [h for h in holdings if h.quantity > 0] if options.only_owned else list(holdings)
    content = formatter(rows, options)

    logger.info(
        "export_generated",
        extra={"format": options.format, "record_count": len(rows)},
    )
    return content


def format_json(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """JSON array of card objects, importable by the json parser."""
    return json.dumps([_json_record(h, options) for h in holdings], indent=2)


def format_csv(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """CSV with a header row; the first two columns are name and quantity."""
    headers = ["Card Name", "Quantity", "Set Name", "Set Number", "Type", "Rarity"]
    if options.include_conditions:
        headers.append("Condition")
    if options.include_values:
        headers.extend(["Market Price", "Total Value"])
    if options.include_metadata:
        headers.extend(["Added Date", "Last Updated"])

    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)

    for holding in holdings:
        row: list[Any] = [
            holding.card_name,
            holding.quantity,
            holding.set_name or "",
            holding.set_number or "",
            holding.card_type or "",
            holding.rarity or "",
        ]
        if options.include_conditions:
            row.append(holding.condition or DEFAULT_CONDITION)
        if options.include_values:
            row.extend([holding.market_price or 0.0, holding.total_value])
        if options.include_metadata:
            row.extend([_iso(holding.added_at) or "", _iso(holding.updated_at) or ""])
        writer.writerow(row)

    return buffer.getvalue().rstrip("\n")


def format_decklist(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """Plain "quantity name" lines under a // comment header."""
    lines = [
        f"// {options.custom_name or DEFAULT_EXPORT_NAME}",
        "// Format: Quantity Card Name",
        "",
    ]
    lines.extend(f"{h.quantity} {h.card_name}" for h in holdings)
    return "\n".join(lines)


def format_text(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """Human-readable list: "2x Name (Set #12) [Condition]"."""
    lines: list[str] = []

    if options.include_metadata:
        lines.append(f"# {options.custom_name or DEFAULT_EXPORT_NAME} Export")
        lines.append(f"# Total Cards: {sum(h.quantity for h in holdings)}")
        lines.append(f"# Unique Cards: {len(holdings)}")
        lines.append("")

    for holding in holdings:
        line = f"{holding.quantity}x {holding.card_name}"
        if holding.set_name:
            number = f" #{holding.set_number}" if holding.set_number else ""
            line += f" ({holding.set_name}{number})"
        if options.include_conditions and holding.condition:
            line += f" [{holding.condition}]"
        lines.append(line)

    return "\n".join(lines)


def format_mtga(holdings: Sequence[Holding], _options: ExportOptions) -> str:
    """MTGA-style deck text; set info only when both code and number are known."""
    lines = ["Deck"]
    for holding in holdings:
        line = f"{holding.quantity} {holding.card_name}"
        if holding.set_code and holding.set_number:
            line += f" ({holding.set_code}) {holding.set_number}"
        lines.append(line)
    return "\n".join(lines)


def format_cockatrice(holdings: Sequence[Holding], options: ExportOptions) -> str:
    """Cockatrice .cod deck file with every card in the main zone."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<cockatrice_deck version="1">',
        f"  <deckname>{escape(options.custom_name or DEFAULT_EXPORT_NAME)}</deckname>",
        f"  <comments>{escape(options.description or '')}</comments>",
        '  <zone name="main">',
    ]
    lines.extend(
        f'    <card number="{h.quantity}" name={quoteattr(h.card_name)}/>' for h in holdings
    )
    lines.extend(["  </zone>", "</cockatrice_deck>", ""])
    return "\n".join(lines)


def export_filename(options: ExportOptions, today: date) -> str:
    """Download filename, e.g. "card-collection-2025-01-31.csv"."""
    slug = re.sub(r"[^a-z0-9]+", "-", (options.custom_name or DEFAULT_EXPORT_NAME).lower())
    slug = slug.strip("-") or "card-collection"
    extension = _EXPORT_EXTENSIONS.get(options.format, "txt")
    return f"{slug}-{today.isoformat()}.{extension}"


def _json_record(holding: Holding, options: ExportOptions) -> dict[str, Any]:
    record: dict[str, Any] = {
        "cardName": holding.card_name,
        "quantity": holding.quantity,
    }
    if holding.set_name:
        record["setName"] = holding.set_name
    if holding.set_number:
        record["setNumber"] = holding.set_number

    if options.include_metadata:
        record["cardId"] = holding.card_id
        record["addedAt"] = _iso(holding.added_at)
        record["updatedAt"] = _iso(holding.updated_at)
    if options.include_conditions:
        record["condition"] = holding.condition or DEFAULT_CONDITION
    if options.include_values:
        record["marketPrice"] = holding.market_price or 0.0
        record["totalValue"] = holding.total_value

    return record


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


_FORMATTERS: dict[str, Callable[[Sequence[Holding], ExportOptions], str]] = {
    "csv": format_csv,
    "json": format_json,
    "decklist": format_decklist,
    "txt": format_text,
    "mtga": format_mtga,
    "cockatrice": format_cockatrice,
}
