from cardport.models.entries import (
    CardEntry,
    ParseError,
    ParseResult,
    entries_of,
    errors_of,
)
from cardport.models.export import (
    DEFAULT_CONDITION,
    EXPORT_FORMATS,
    ExportFormat,
    ExportOptions,
    Holding,
)
from cardport.models.failure import (
    ApiResponse,
    BatchTooLargeError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    UnsupportedFormatError,
)
from cardport.models.reconciliation import (
    ImportAction,
    ImportedCard,
    ImportResult,
    ResolvedCard,
    UpdatePolicy,
)
from cardport.models.versions import (
    CardChange,
    CardDescriptor,
    ChangeType,
    DiffSummary,
    SnapshotCard,
    VersionSnapshot,
)

__all__ = [
    "ApiResponse",
    "BatchTooLargeError",
    "CardChange",
    "CardDescriptor",
    "CardEntry",
    "ChangeType",
    "DEFAULT_CONDITION",
    "DiffSummary",
    "EXPORT_FORMATS",
    "ExportFormat",
    "ExportOptions",
    "FailureDetail",
    "FailureKind",
    "Holding",
    "ImportAction",
    "ImportResult",
    "ImportedCard",
    "KnownError",
    "OutcomeType",
    "ParseError",
    "ParseResult",
    "ResolvedCard",
    "SnapshotCard",
    "UnsupportedFormatError",
    "UpdatePolicy",
    "VersionSnapshot",
    "entries_of",
    "errors_of",
]
