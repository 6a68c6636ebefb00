"""Observability layer: usage metrics and structured logging.

Metrics are kept in process memory only and reset on restart.
"""

from .logging import OperationLogger, configure_logging
from .metrics import MetricsRegistry, OperationMetric

__all__ = [
    "MetricsRegistry",
    "OperationMetric",
    "OperationLogger",
    "configure_logging",
]
