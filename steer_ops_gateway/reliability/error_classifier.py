"""
Error classification for backend operation failures.

This module maps raw failures to a category/type/suggestion triple so the
retry executor can decide whether another attempt is worthwhile and callers
get an actionable hint. Classification is pure: it never retries or logs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..errors import BackendError, OperationFailedError, error_message
from .error_mapper import ErrorMapper


class ErrorCategory(str, Enum):
    """Top-level error categories exposed in the result envelope."""
    AUTH = "Auth"
    PERMISSION = "Permission"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    QUOTA = "Quota"
    NETWORK = "Network"
    UNKNOWN = "Unknown"


class ErrorType(str, Enum):
    """Error types within a category."""
    DUPLICATE = "Duplicate"
    INVALID_INPUT = "InvalidInput"
    AUTHENTICATION = "Authentication"
    RATE_LIMITED = "RateLimited"
    SESSION = "Session"
    ACCESS_DENIED = "AccessDenied"
    RESOURCE_MISSING = "ResourceMissing"
    EXCEEDED = "Exceeded"
    TIMEOUT = "Timeout"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    CONNECTION = "Connection"
    GENERIC = "Generic"
    # Gateway-side outcomes, never produced by classify()
    RATE_LIMIT_EXCEEDED = "RateLimitExceeded"
    CANCELLED = "Cancelled"


# Types that are never worth a second attempt
NON_RETRYABLE_TYPES: FrozenSet[ErrorType] = frozenset({
    ErrorType.AUTHENTICATION,
    ErrorType.ACCESS_DENIED,
    ErrorType.INVALID_INPUT,
})


@dataclass(frozen=True)
class ErrorClassification:
    """Category, type and remediation hint for a failure."""
    category: ErrorCategory
    type: ErrorType
    suggestion: str

    @property
    def is_retryable(self) -> bool:
        return self.type not in NON_RETRYABLE_TYPES

    def to_dict(self) -> Dict[str, str]:
        return {
            "category": self.category.value,
            "type": self.type.value,
            "suggestion": self.suggestion,
        }


_Entry = Tuple[ErrorCategory, ErrorType, str]


class ErrorClassifier:
    """Static-table error classifier."""

    # Backend error codes
    CODE_MAPPINGS: Dict[str, _Entry] = {
        'auth/email-already-exists': (ErrorCategory.AUTH, ErrorType.DUPLICATE, 'Use a different email/phone number'),
        'auth/phone-number-already-exists': (ErrorCategory.AUTH, ErrorType.DUPLICATE, 'Use a different email/phone number'),
        'auth/uid-already-exists': (ErrorCategory.AUTH, ErrorType.DUPLICATE, 'Use a different uid'),
        'auth/invalid-email': (ErrorCategory.AUTH, ErrorType.INVALID_INPUT, 'Check input format and requirements'),
        'auth/weak-password': (ErrorCategory.AUTH, ErrorType.INVALID_INPUT, 'Check input format and requirements'),
        'auth/invalid-password': (ErrorCategory.AUTH, ErrorType.INVALID_INPUT, 'Check input format and requirements'),
        'auth/invalid-phone-number': (ErrorCategory.AUTH, ErrorType.INVALID_INPUT, 'Check input format and requirements'),
        'auth/invalid-argument': (ErrorCategory.AUTH, ErrorType.INVALID_INPUT, 'Check input format and requirements'),
        'auth/user-not-found': (ErrorCategory.AUTH, ErrorType.AUTHENTICATION, 'Verify credentials'),
        'auth/wrong-password': (ErrorCategory.AUTH, ErrorType.AUTHENTICATION, 'Verify credentials'),
        'auth/invalid-credential': (ErrorCategory.AUTH, ErrorType.AUTHENTICATION, 'Verify credentials'),
        'unauthenticated': (ErrorCategory.AUTH, ErrorType.AUTHENTICATION, 'Verify credentials'),
        'auth/too-many-requests': (ErrorCategory.AUTH, ErrorType.RATE_LIMITED, 'Please wait before retrying'),
        'auth/requires-recent-login': (ErrorCategory.AUTH, ErrorType.SESSION, 'Re-authenticate the user'),
        'auth/id-token-expired': (ErrorCategory.AUTH, ErrorType.SESSION, 'Re-authenticate the user'),
        'permission-denied': (ErrorCategory.PERMISSION, ErrorType.ACCESS_DENIED, 'Check user permissions and security rules'),
        'auth/insufficient-permission': (ErrorCategory.PERMISSION, ErrorType.ACCESS_DENIED, 'Check user permissions and security rules'),
        'not-found': (ErrorCategory.NOT_FOUND, ErrorType.RESOURCE_MISSING, 'Verify the resource exists'),
        'storage/object-not-found': (ErrorCategory.NOT_FOUND, ErrorType.RESOURCE_MISSING, 'Verify the resource exists'),
        'already-exists': (ErrorCategory.CONFLICT, ErrorType.DUPLICATE, 'Resource already exists'),
        'resource-exhausted': (ErrorCategory.QUOTA, ErrorType.EXCEEDED, 'Quota exceeded, wait or upgrade plan'),
        'storage/quota-exceeded': (ErrorCategory.QUOTA, ErrorType.EXCEEDED, 'Quota exceeded, wait or upgrade plan'),
        'cancelled': (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry'),
        'deadline-exceeded': (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry'),
        'unavailable': (ErrorCategory.NETWORK, ErrorType.SERVICE_UNAVAILABLE, 'Service temporarily unavailable'),
    }

    # Transient socket-level codes
    TRANSIENT_CODES: Dict[str, _Entry] = {
        'ECONNRESET': (ErrorCategory.NETWORK, ErrorType.CONNECTION, 'Network issues, please retry'),
        'ECONNREFUSED': (ErrorCategory.NETWORK, ErrorType.CONNECTION, 'Network issues, please retry'),
        'EPIPE': (ErrorCategory.NETWORK, ErrorType.CONNECTION, 'Network issues, please retry'),
        'ETIMEDOUT': (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry'),
        'ESOCKETTIMEDOUT': (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry'),
    }

    STATUS_CODE_MAPPINGS: Dict[int, _Entry] = {
        401: (ErrorCategory.AUTH, ErrorType.AUTHENTICATION, 'Verify credentials'),
        403: (ErrorCategory.PERMISSION, ErrorType.ACCESS_DENIED, 'Check user permissions and security rules'),
        404: (ErrorCategory.NOT_FOUND, ErrorType.RESOURCE_MISSING, 'Verify the resource exists'),
        409: (ErrorCategory.CONFLICT, ErrorType.DUPLICATE, 'Resource already exists'),
        429: (ErrorCategory.QUOTA, ErrorType.EXCEEDED, 'Quota exceeded, wait or upgrade plan'),
        502: (ErrorCategory.NETWORK, ErrorType.SERVICE_UNAVAILABLE, 'Service temporarily unavailable'),
        503: (ErrorCategory.NETWORK, ErrorType.SERVICE_UNAVAILABLE, 'Service temporarily unavailable'),
        504: (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry'),
    }

    # Message patterns, checked in order (timeout before connection)
    NETWORK_PATTERNS: Tuple[Tuple[Tuple[str, ...], _Entry], ...] = (
        (('timed out', 'timeout', 'deadline exceeded'),
         (ErrorCategory.NETWORK, ErrorType.TIMEOUT, 'Network timeout, please retry')),
        (('connection reset', 'socket hang up', 'connection refused', 'broken pipe',
          'connection aborted', 'network is unreachable'),
         (ErrorCategory.NETWORK, ErrorType.CONNECTION, 'Network issues, please retry')),
        (('service unavailable', 'temporarily unavailable'),
         (ErrorCategory.NETWORK, ErrorType.SERVICE_UNAVAILABLE, 'Service temporarily unavailable')),
    )

    GENERIC_SUGGESTION = 'Unexpected error occurred'

    @classmethod
    def classify(cls, error: Any) -> ErrorClassification:
        """
        Classify a failure.

        Args:
            error: A ``BackendError``, any other exception, or a mapping with
                ``code``/``message``/``status_code`` keys

        Returns:
            ErrorClassification with category, type and suggestion
        """
        if isinstance(error, OperationFailedError):
            return error.classification

        backend_error = cls._as_backend_error(error)

        # Numeric codes (gRPC, errno) are not in the string tables
        code = backend_error.code if isinstance(backend_error.code, str) else None
        if code:
            if code in cls.CODE_MAPPINGS:
                return cls._build(cls.CODE_MAPPINGS[code])
            if code.upper() in cls.TRANSIENT_CODES:
                return cls._build(cls.TRANSIENT_CODES[code.upper()])

        status_code = backend_error.status_code
        if status_code in cls.STATUS_CODE_MAPPINGS:
            return cls._build(cls.STATUS_CODE_MAPPINGS[status_code])
        if isinstance(status_code, int) and status_code >= 500:
            return cls._build(cls.STATUS_CODE_MAPPINGS[503])

        text = cls._message_of(backend_error)
        for patterns, entry in cls.NETWORK_PATTERNS:
            if any(pattern in text for pattern in patterns):
                return cls._build(entry)

        # An unrecognised backend code carries its own message as the hint
        if code:
            return ErrorClassification(
                category=ErrorCategory.UNKNOWN,
                type=ErrorType.GENERIC,
                suggestion=backend_error.message or cls.GENERIC_SUGGESTION
            )

        return ErrorClassification(
            category=ErrorCategory.UNKNOWN,
            type=ErrorType.GENERIC,
            suggestion=cls.GENERIC_SUGGESTION
        )

    @classmethod
    def is_retryable(cls, error: Any) -> bool:
        return cls.classify(error).is_retryable

    @staticmethod
    def _build(entry: _Entry) -> ErrorClassification:
        category, error_type, suggestion = entry
        return ErrorClassification(category=category, type=error_type, suggestion=suggestion)

    @staticmethod
    def _as_backend_error(error: Any) -> BackendError:
        if isinstance(error, BackendError):
            return error
        if isinstance(error, BaseException):
            return ErrorMapper.to_backend_error(error)
        if isinstance(error, dict):
            return BackendError(
                message=str(error.get('message', '')),
                code=error.get('code'),
                status_code=error.get('status_code', error.get('statusCode')),
            )
        return BackendError(message=str(error))

    @staticmethod
    def _message_of(error: BackendError) -> str:
        parts = [error.message or '']
        if error.original_error is not None:
            parts.append(error_message(error.original_error))
        return ' '.join(parts).lower()


def classification_for(category: ErrorCategory, error_type: ErrorType, suggestion: Optional[str] = None) -> ErrorClassification:
    """Build a classification for a gateway-side outcome."""
    return ErrorClassification(
        category=category,
        type=error_type,
        suggestion=suggestion or ErrorClassifier.GENERIC_SUGGESTION
    )
