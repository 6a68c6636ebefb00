"""Operation handler registry.

Maps operation names to handler callables so dispatch is a table lookup
instead of a long conditional chain. Host applications register handlers at
startup:

    registry = OperationRegistry()

    @registry.operation("listUsers")
    async def list_users(handle, args):
        return await handle.list_users(max_results=args.get("maxResults", 1000))
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..errors import BackendError
from .base import OperationExecutor

logger = logging.getLogger(__name__)

OperationHandler = Callable[[Any, Dict[str, Any]], Union[Any, Awaitable[Any]]]


class OperationRegistry:
    """Registry of operation handlers keyed by operation name."""

    def __init__(self):
        self._handlers: Dict[str, OperationHandler] = {}

    def register(self, name: str, handler: OperationHandler) -> None:
        """Register a handler.

        Raises:
            ValueError: If a handler with the same name is already registered
            TypeError: If ``handler`` is not callable
        """
        if not callable(handler):
            raise TypeError(f"Handler for '{name}' must be callable, got {type(handler)}")
        if name in self._handlers:
            raise ValueError(f"Operation '{name}' already registered")

        self._handlers[name] = handler
        logger.debug(f"Registered handler for operation '{name}'")

    def operation(self, name: str) -> Callable[[OperationHandler], OperationHandler]:
        """Decorator form of ``register``."""
        def decorator(handler: OperationHandler) -> OperationHandler:
            self.register(name, handler)
            return handler
        return decorator

    def get(self, name: str) -> Optional[OperationHandler]:
        return self._handlers.get(name)

    def has(self, name: str) -> bool:
        return name in self._handlers

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def unregister(self, name: str) -> bool:
        """Unregister a handler (mainly for testing)."""
        if name in self._handlers:
            del self._handlers[name]
            logger.debug(f"Unregistered handler for operation '{name}'")
            return True
        return False

    def clear(self) -> None:
        """Clear all registered handlers (mainly for testing)."""
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)


class HandlerExecutor(OperationExecutor):
    """Executor that dispatches through an ``OperationRegistry``."""

    def __init__(self, registry: Optional[OperationRegistry] = None):
        self.registry = registry if registry is not None else OperationRegistry()

    async def execute(self, op_name: str, handle: Any, args: Dict[str, Any]) -> Any:
        handler = self.registry.get(op_name)
        if handler is None:
            raise BackendError(
                f"No handler registered for operation {op_name}",
                code="unimplemented"
            )

        result = handler(handle, args)
        if inspect.isawaitable(result):
            result = await result
        return result
