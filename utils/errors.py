"""
Error types and structured error responses.

Every failure raised by the tools is an ``ElasticMCPError`` tagged with an
``ErrorKind``. The subclasses only preset the kind so callers can still catch
them individually.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Stable error codes reported to tool callers."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    CANCELLED = "CANCELLED"
    ELASTICSEARCH_ERROR = "ELASTICSEARCH_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.AUTHENTICATION_ERROR: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMIT_EXCEEDED: 429,
    ErrorKind.CANCELLED: 499,
    ErrorKind.ELASTICSEARCH_ERROR: 500,
    ErrorKind.CONNECTION_ERROR: 503,
    ErrorKind.INTERNAL_ERROR: 500,
}

SENSITIVE_KEYS = (
    "password",
    "apikey",
    "api_key",
    "token",
    "secret",
    "auth",
    "authorization",
    "credential",
)

RETRYABLE_MARKERS = ("timeout", "connection", "network", "502", "503", "504")


class ElasticMCPError(Exception):
    """Base error carrying a kind, an HTTP-like status code and context."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.context = context

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "context": sanitize_context(self.context),
        }


class ValidationError(ElasticMCPError, ValueError):
    """Malformed or unsafe caller input."""
    kind = ErrorKind.VALIDATION_ERROR


class NotFoundError(ElasticMCPError):
    """Target index or document does not exist."""
    kind = ErrorKind.NOT_FOUND


class ElasticConnectionError(ElasticMCPError):
    """The cluster could not be reached."""
    kind = ErrorKind.CONNECTION_ERROR


class ExportCancelledError(ElasticMCPError):
    """An export was cancelled between batches."""
    kind = ErrorKind.CANCELLED


class ElasticsearchError(ElasticMCPError):
    """A cluster call failed; the original error is kept in context."""
    kind = ErrorKind.ELASTICSEARCH_ERROR

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(context or {})
        if original_error is not None:
            merged["original_error"] = {
                "name": type(original_error).__name__,
                "message": str(original_error),
            }
        super().__init__(message, merged)
        self.original_error = original_error


def sanitize_context(context: Any) -> Any:
    """
    Mask values stored under credential-like keys.

    Args:
        context: Error context (dicts and lists are walked recursively)

    Returns:
        A copy of the context with sensitive values replaced by '***'
    """
    if isinstance(context, dict):
        sanitized = {}
        for key, value in context.items():
            if any(marker in str(key).lower() for marker in SENSITIVE_KEYS):
                sanitized[key] = "***"
            else:
                sanitized[key] = sanitize_context(value)
        return sanitized
    if isinstance(context, list):
        return [sanitize_context(item) for item in context]
    return context


def build_error_response(
    error: BaseException,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Convert an exception into the structured error payload returned to clients.

    Unknown exceptions are reported as INTERNAL_ERROR without their message or
    context so nothing internal leaks to the caller.
    """
    if isinstance(error, ElasticMCPError):
        body = error.to_dict()
    else:
        body = {
            "code": ErrorKind.INTERNAL_ERROR.value,
            "message": "An unexpected error occurred",
            "status_code": STATUS_CODES[ErrorKind.INTERNAL_ERROR],
            "context": None,
        }

    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    body["request_id"] = request_id
    return {"error": body}


def is_retryable_error(error: BaseException) -> bool:
    """Whether a caller may reasonably retry the failed operation."""
    if isinstance(error, (ElasticConnectionError, ElasticsearchError)):
        return True

    if isinstance(error, ElasticMCPError):
        return False

    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MARKERS)
