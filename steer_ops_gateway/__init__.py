"""
Steer Ops Gateway - resilient multi-tenant operation dispatch.

Applies the same reliability controls to every administrative operation
sent to a managed cloud backend:
- Per-category token-bucket rate limiting
- Retry with capped exponential backoff, stopping early on errors that
  retrying cannot fix
- TTL response caching for read-only operations
- In-process usage metrics
- Lazy per-tenant backend handle pooling

Every invocation returns a uniform ``{success, data?, error?}`` envelope.
"""

__version__ = "0.1.0"

from .errors import (
    BackendError,
    ConfigurationError,
    GatewayError,
    OperationCancelledError,
    OperationFailedError,
    RateLimitExceeded,
    UnknownOperationError,
)
from .executors import HandlerExecutor, OperationExecutor, OperationRegistry
from .gateway import InvokeOptions, OperationCatalog, OperationGateway
from .models import (
    CacheSettings,
    ErrorDetail,
    GatewayConfig,
    OperationResult,
    OperationSpec,
    RateLimitSettings,
    RetrySettings,
)
from .reliability import ErrorCategory, ErrorClassification, ErrorClassifier, ErrorType

__all__ = [
    # Gateway
    "OperationGateway",
    "OperationCatalog",
    "InvokeOptions",

    # Executors
    "OperationExecutor",
    "OperationRegistry",
    "HandlerExecutor",

    # Models
    "GatewayConfig",
    "RateLimitSettings",
    "RetrySettings",
    "CacheSettings",
    "OperationSpec",
    "OperationResult",
    "ErrorDetail",

    # Errors
    "BackendError",
    "GatewayError",
    "ConfigurationError",
    "UnknownOperationError",
    "RateLimitExceeded",
    "OperationFailedError",
    "OperationCancelledError",

    # Classification
    "ErrorClassifier",
    "ErrorClassification",
    "ErrorCategory",
    "ErrorType",
]
