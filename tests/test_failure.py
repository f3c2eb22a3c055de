"""Tests for the failure envelope."""

from cardport.models.failure import (
    ApiResponse,
    BatchTooLargeError,
    FailureKind,
    OutcomeType,
)


class TestApiResponse:
    def test_known_failure_shape(self) -> None:
        response = BatchTooLargeError(size=5, limit=2).to_response()

        assert response.model_dump(mode="json") == {
            "outcome": "known_failure",
            "failure": {
                "kind": "batch_too_large",
                "message": "Import limited to 2 cards at once",
                "detail": "Received 5 entries",
                "suggestion": "Split the import into smaller batches.",
            },
        }

    def test_unknown_failure_uses_fixed_message(self) -> None:
        response = ApiResponse.unknown_failure(detail="RuntimeError")

        assert response.outcome is OutcomeType.UNKNOWN_FAILURE
        assert response.failure.kind is FailureKind.UNKNOWN
        assert response.failure.message == "The operation failed unexpectedly. Please retry."
        assert response.failure.detail == "RuntimeError"

    def test_outcomes_are_failures_only(self) -> None:
        assert {o.value for o in OutcomeType} == {"known_failure", "unknown_failure"}
        assert {k.value for k in FailureKind} == {
            "unsupported_format",
            "parse_failed",
            "empty_result",
            "batch_too_large",
            "unknown",
        }
