from cardport.parsers.formats import (
    IMPORT_FORMATS,
    ImportFormat,
    normalize_format,
    parse_csv,
    parse_decklist,
    parse_import,
    parse_json,
    parse_mtga,
)
from cardport.parsers.heuristics import (
    detect_delimiter,
    is_header_row,
    parse_quantity,
    split_columns,
    strip_quotes,
)

__all__ = [
    "IMPORT_FORMATS",
    "ImportFormat",
    "detect_delimiter",
    "is_header_row",
    "normalize_format",
    "parse_csv",
    "parse_decklist",
    "parse_import",
    "parse_json",
    "parse_mtga",
    "parse_quantity",
    "split_columns",
    "strip_quotes",
]
