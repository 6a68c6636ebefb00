"""
TTL response cache for read-only operations.

Expired entries are dropped lazily when read and by a periodic sweep, so
memory stays bounded even for keys that are never requested again.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


def make_cache_key(
    op_name: str,
    args: Optional[Mapping[str, Any]] = None,
    tenant_id: Optional[str] = None
) -> str:
    """
    Deterministic cache key for an invocation.

    The tenant id, when given, prefixes the key so tenants never share
    cached responses.

    Keys are sorted at every nesting level so argument maps that differ only
    in insertion order produce the same key. Values JSON cannot encode are
    rendered with ``str``.
    """
    payload = json.dumps(
        dict(args or {}),
        sort_keys=True,
        separators=(",", ":"),
        default=str
    )
    key = f"{op_name}:{payload}"
    return f"{tenant_id}/{key}" if tenant_id else key


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ResponseCache:
    """In-memory key/value cache with per-entry TTL."""

    def __init__(
        self,
        default_ttl_seconds: float = 300,
        enabled: bool = True,
        max_entries: Optional[int] = None,
        sweep_interval_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the cache.

        Args:
            default_ttl_seconds: TTL used when ``put`` is given none
            enabled: A disabled cache always misses and never stores
            max_entries: Optional bound; the entry closest to expiry is evicted
            sweep_interval_seconds: Period of the background sweeper
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.default_ttl = default_ttl_seconds
        self.enabled = enabled
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._store: Dict[str, CacheEntry] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Live entry for ``key`` or None; an expired entry is removed."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                # expired
                del self._store[key]
                return None
            return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.get_entry(key)
        return default if entry is None else entry.value

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        if not self.enabled:
            return
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            now = self._clock()
            if self.max_entries and key not in self._store and len(self._store) >= self.max_entries:
                self._evict_one(now)
            self._store[key] = CacheEntry(value=value, expires_at=now + ttl)
        logger.debug(f"Cached {key[:80]} for {ttl}s")

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def sweep(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
            for k in expired:
                del self._store[k]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.size

    def start_sweeper(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return

        async def sweeper():
            while True:
                await asyncio.sleep(self.sweep_interval)
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Cache sweep failed: {e}")

        self._sweep_task = asyncio.create_task(sweeper())

    async def stop_sweeper(self) -> None:
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None

    @property
    def sweeper_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def _evict_one(self, now: float) -> None:
        # Expired entries go first, otherwise the one closest to expiry
        victim = min(self._store.items(), key=lambda kv: kv[1].expires_at)[0]
        self._store.pop(victim, None)
