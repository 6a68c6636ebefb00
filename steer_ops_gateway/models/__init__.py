from .catalog import OperationSpec
from .config import CacheSettings, GatewayConfig, RateLimitSettings, RetrySettings
from .results import ErrorDetail, OperationResult

__all__ = [
    "OperationSpec",
    "GatewayConfig",
    "RateLimitSettings",
    "RetrySettings",
    "CacheSettings",
    "ErrorDetail",
    "OperationResult",
]
