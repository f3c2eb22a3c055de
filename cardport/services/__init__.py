"""
CardPort services.

Import preview, reconciliation, export rendering and deck version diffs.
"""

from cardport.services.card_finder import CatalogCardResolver
from cardport.services.export_formatter import (
    EXPORT_CONTENT_TYPES,
    export_filename,
    format_export,
)
from cardport.services.preview import ImportPreview, build_preview, preview_results
from cardport.services.reconciliation import (
    CardResolver,
    HoldingsStore,
    InMemoryHoldings,
    check_batch_size,
    merged_quantity,
    reconcile,
)
from cardport.services.version_diff import diff_snapshots, summarize_changes

__all__ = [
    # Preview (bounded prefix scan)
    "ImportPreview",
    "build_preview",
    "preview_results",
    # Reconciliation
    "CardResolver",
    "CatalogCardResolver",
    "HoldingsStore",
    "InMemoryHoldings",
    "check_batch_size",
    "merged_quantity",
    "reconcile",
    # Export
    "EXPORT_CONTENT_TYPES",
    "export_filename",
    "format_export",
    # Version diff
    "diff_snapshots",
    "summarize_changes",
]
