"""
Failure classification and response envelope.

Import/export failures come in three tiers that are never conflated:

- Parse failures are values (ParseError), not exceptions
- Resolution failures are counted in ImportResult, not raised
- File-level and batch-level failures stop the operation and are raised
  as KnownError subclasses, which the API turns into an ApiResponse

INVARIANT: No raw 500 errors may reach the client. Anything that is not a
KnownError becomes an unknown_failure envelope.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    UNSUPPORTED_FORMAT = "unsupported_format"
    PARSE_FAILED = "parse_failed"

    # Nothing usable in the input
    EMPTY_RESULT = "empty_result"

    # Constraint violations
    BATCH_TOO_LARGE = "batch_too_large"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel):
    """Response envelope used for classified failures."""

    outcome: OutcomeType
    failure: FailureDetail

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse":
        """Create a response for a failure the system can explain."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse":
        """Catch-all for unexpected exceptions. The message is fixed."""
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="The operation failed unexpectedly. Please retry.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class UnsupportedFormatError(KnownError):
    """Raised for a format identifier no parser or formatter understands."""

    def __init__(self, format_name: str, supported: tuple[str, ...]):
        self.format_name = format_name
        super().__init__(
            kind=FailureKind.UNSUPPORTED_FORMAT,
            message=f"Unsupported format: {format_name}",
            suggestion=f"Use one of: {', '.join(supported)}",
        )


class BatchTooLargeError(KnownError):
    """
    Raised before reconciliation when a batch exceeds the size cap.

    The whole batch is rejected; nothing is partially applied.
    """

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            kind=FailureKind.BATCH_TOO_LARGE,
            message=f"Import limited to {limit} cards at once",
            detail=f"Received {size} entries",
            suggestion="Split the import into smaller batches.",
        )
