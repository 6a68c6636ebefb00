"""Reliability layer for error handling, admission control and retries.

This layer handles:
- Error classification into the category/type/suggestion taxonomy
- Mapping foreign exceptions onto structured backend errors
- Per-category token-bucket rate limiting
- Retry with capped exponential backoff
"""

from .error_mapper import ErrorMapper
from .error_classifier import (
    ErrorCategory, ErrorClassification, ErrorClassifier, ErrorType,
    NON_RETRYABLE_TYPES, classification_for
)
from .rate_limiter import RateLimiter, TokenBucket
from .retry import RetryExecutor, RetryPolicy, RetryState

__all__ = [
    "ErrorMapper",
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "ErrorType",
    "NON_RETRYABLE_TYPES",
    "classification_for",
    "RateLimiter",
    "TokenBucket",
    "RetryExecutor",
    "RetryPolicy",
    "RetryState",
]
