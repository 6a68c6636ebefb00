"""Operation executors and the handler registry."""

from .base import OperationExecutor
from .registry import HandlerExecutor, OperationHandler, OperationRegistry

__all__ = [
    "OperationExecutor",
    "OperationRegistry",
    "OperationHandler",
    "HandlerExecutor",
]
