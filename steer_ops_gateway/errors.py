"""Gateway error definitions.

``BackendError`` is the structured error value raised at the executor
boundary. Everything else derives from ``GatewayError`` and is raised by the
gateway's own reliability components.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .reliability.error_classifier import ErrorClassification


class BackendError(Exception):
    """
    Structured failure reported by an operation executor.

    Executors should raise this (or let ``ErrorMapper`` build one) instead of
    leaking SDK-specific exception shapes into the gateway.

    Attributes:
        message: Error message
        code: Backend error code (e.g. ``auth/user-not-found``, ``unavailable``)
        status_code: HTTP status code if applicable
        retry_after: Seconds to wait before retry if the backend said so
        details: Extra structured context
        original_error: The wrapped exception, if any
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retry_after = retry_after
        self.details = details or {}
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"BackendError(code={self.code!r}, status_code={self.status_code!r}, message={self.message!r})"


class GatewayError(Exception):
    """Base exception for gateway errors."""
    pass


class ConfigurationError(GatewayError):
    """Raised when the gateway configuration or operation catalog is invalid."""
    pass


class UnknownOperationError(GatewayError):
    """Raised when an operation name is not in the catalog."""

    def __init__(self, op_name: str):
        self.op_name = op_name
        super().__init__(f"Unknown operation: {op_name}")


class RateLimitExceeded(GatewayError):
    """Raised when a rate-limit bucket has no tokens left."""

    def __init__(self, category: str, retry_after_ms: int):
        self.category = category
        self.retry_after_ms = retry_after_ms
        seconds = max(1, -(-retry_after_ms // 1000))
        super().__init__(
            f"Rate limit exceeded for {category}. Retry after {seconds} seconds"
        )


class OperationFailedError(GatewayError):
    """Terminal failure after the retry executor gave up."""

    def __init__(
        self,
        op_name: str,
        classification: "ErrorClassification",
        attempts: int,
        last_error: BaseException
    ):
        self.op_name = op_name
        self.classification = classification
        self.attempts = attempts
        self.last_error = last_error

        message = f"Operation {op_name} failed after {attempts} attempt"
        if attempts != 1:
            message += "s"
        super().__init__(f"{message}: {error_message(last_error)}")

    @property
    def category(self) -> str:
        return self.classification.category.value

    @property
    def type(self) -> str:
        return self.classification.type.value

    @property
    def suggestion(self) -> str:
        return self.classification.suggestion


class OperationCancelledError(GatewayError):
    """Raised when a deadline or cancel signal stops the retry loop."""

    def __init__(self, op_name: str, attempts: int, reason: str = "cancelled"):
        self.op_name = op_name
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Operation {op_name} {reason} after {attempts} attempt(s)")


def error_message(error: BaseException) -> str:
    """Best-effort human readable message for an exception."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    try:
        text = str(error)
    except Exception:  # noqa: BLE001
        text = ""
    return text or type(error).__name__
