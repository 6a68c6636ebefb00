"""Per-invocation options."""

import asyncio
from dataclasses import dataclass
from typing import Optional


@dataclass
class InvokeOptions:
    """
    Options for a single ``OperationGateway.invoke`` call.

    Attributes:
        timeout_ms: Overall budget; no new attempt starts once it has elapsed
        bypass_cache: Skip the cache lookup (a successful result is still stored)
        cancel_event: Setting this event stops retries between attempts
    """
    timeout_ms: Optional[float] = None
    bypass_cache: bool = False
    cancel_event: Optional[asyncio.Event] = None

    def __post_init__(self):
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
