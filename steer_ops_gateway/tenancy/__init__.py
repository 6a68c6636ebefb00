"""Per-tenant backend handle management."""

from .pool import DEFAULT_TENANT, BackendInstancePool, HandleFactory

__all__ = ["BackendInstancePool", "DEFAULT_TENANT", "HandleFactory"]
