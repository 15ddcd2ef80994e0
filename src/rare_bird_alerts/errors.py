"""
Error taxonomy surfaced to the UI.

Every failure the core can report maps to exactly one ``ErrorKind``. The
proxy normalizes failures into a status + message; the API client performs
the final classification.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    """Conditions a caller can tell apart and act on."""

    MISSING_CREDENTIAL = "missing_credential"
    MISSING_ENDPOINT = "missing_endpoint"
    INVALID_CREDENTIAL = "invalid_credential"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_FAILURE = "transport_failure"


# Machine-readable ``code`` values written by the proxy into its error bodies.
PROXY_CODE_MISSING_ENDPOINT = "missing_endpoint"
PROXY_CODE_MISSING_CREDENTIAL = "missing_credential"
PROXY_CODE_UPSTREAM_STATUS = "upstream_status"
PROXY_CODE_TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class ApiError:
    """A classified failure with enough detail for an actionable message."""

    kind: ErrorKind
    message: str
    status: int | None = None
    details: str | None = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (status {self.status})"
        return self.message


def classify_status(status: int, *, reason: str = "", details: str | None = None) -> ApiError:
    """
    Map a non-success HTTP status to an ``ApiError``.

    401, 429 and 403 get dedicated kinds; everything else is an upstream
    error that keeps the raw status and detail text.
    """
    if status == 401:
        return ApiError(
            ErrorKind.INVALID_CREDENTIAL,
            "Invalid API key. Please check your eBird API key.",
            status=status,
            details=details,
        )
    if status == 429:
        return ApiError(
            ErrorKind.RATE_LIMITED,
            "Rate limit exceeded. Please try again later.",
            status=status,
            details=details,
        )
    if status == 403:
        return ApiError(
            ErrorKind.FORBIDDEN,
            "Access forbidden. Please check your API key permissions.",
            status=status,
            details=details,
        )
    message = f"eBird API error: {status} {reason}".rstrip()
    if details:
        message = f"{message}. Details: {details}"
    return ApiError(ErrorKind.UPSTREAM_ERROR, message, status=status, details=details)
