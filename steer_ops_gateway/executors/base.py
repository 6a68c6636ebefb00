"""Executor interface.

The executor performs the actual backend call for an operation. The gateway
wraps it with caching, admission control and retries; executors themselves
stay thin and report failures by raising.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class OperationExecutor(ABC):
    """Base class for operation executors."""

    @abstractmethod
    async def execute(self, op_name: str, handle: Any, args: Dict[str, Any]) -> Any:
        """Run one attempt of an operation.

        Args:
            op_name: Operation name from the catalog
            handle: Tenant backend handle from the instance pool
            args: Caller-supplied arguments

        Returns:
            Operation result data (should be JSON-serializable)

        Raises:
            BackendError: Preferably; any other exception is mapped by
                ``ErrorMapper`` before classification
        """
        pass
