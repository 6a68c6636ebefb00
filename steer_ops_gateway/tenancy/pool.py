"""
Lazily constructed backend client handles, one per tenant.

A handle is built on the first request for a tenant and then reused for the
lifetime of the pool. Construction is serialized per tenant so concurrent
first callers all receive the same handle.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_TENANT = "default"

HandleFactory = Callable[[str], Union[Any, Awaitable[Any]]]


class BackendInstancePool:
    """Construct-once cache of tenant handles."""

    def __init__(self, factory: HandleFactory):
        """
        Initialize the pool.

        Args:
            factory: Called with a tenant id to build its handle; may be a
                plain function or a coroutine function
        """
        self._factory = factory
        self._handles: Dict[str, Any] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.constructed_count = 0

    @staticmethod
    def resolve_tenant(tenant_id: Optional[str]) -> str:
        return tenant_id or DEFAULT_TENANT

    async def get(self, tenant_id: Optional[str] = None) -> Any:
        """
        Handle for ``tenant_id``, building it on first use.

        A factory failure is propagated and nothing is cached, so the next
        call tries again.
        """
        tenant = self.resolve_tenant(tenant_id)
        handle = self._handles.get(tenant)
        if handle is not None:
            return handle

        lock = self._locks.setdefault(tenant, asyncio.Lock())
        async with lock:
            # Another caller may have finished construction while we waited
            handle = self._handles.get(tenant)
            if handle is not None:
                return handle

            handle = self._factory(tenant)
            if inspect.isawaitable(handle):
                handle = await handle
            if handle is None:
                raise ValueError(f"Handle factory returned None for tenant {tenant}")

            self._handles[tenant] = handle
            self.constructed_count += 1
            logger.info(f"Created backend handle for tenant {tenant}")
            return handle

    async def close(self, tenant_id: Optional[str] = None) -> bool:
        """Tear down one tenant's handle. Returns False if none existed."""
        tenant = self.resolve_tenant(tenant_id)
        lock = self._locks.get(tenant)
        if lock is None:
            return False
        # The lock stays registered: an in-flight get() may still hold it
        async with lock:
            handle = self._handles.pop(tenant, None)
        if handle is None:
            return False
        await self._teardown(tenant, handle)
        return True

    async def close_all(self) -> None:
        for tenant in list(self._handles):
            await self.close(tenant)

    def tenants(self) -> List[str]:
        return list(self._handles)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    async def _teardown(self, tenant: str, handle: Any) -> None:
        closer = getattr(handle, "aclose", None) or getattr(handle, "close", None)
        if closer is not None:
            try:
                result = closer()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Error closing handle for tenant {tenant}: {e}")
        logger.info(f"Closed backend handle for tenant {tenant}")
