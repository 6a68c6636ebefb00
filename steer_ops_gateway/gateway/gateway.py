"""
Operation gateway: the composition root.

Every ``invoke`` runs the same sequence:

1. cache lookup for cacheable operations (a hit returns immediately)
2. rate-limit admission for the operation's category
3. retry-wrapped execution against the tenant's backend handle
4. cache population on success
5. a uniform ``OperationResult`` envelope, whatever happened
"""

import copy
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from ..caching.response_cache import ResponseCache, make_cache_key
from ..errors import (
    OperationCancelledError, OperationFailedError, RateLimitExceeded, error_message
)
from ..executors.base import OperationExecutor
from ..executors.registry import HandlerExecutor, OperationRegistry
from ..models.config import GatewayConfig
from ..models.results import ErrorDetail, OperationResult
from ..observability.logging import OperationLogger
from ..observability.metrics import MetricsRegistry
from ..reliability.error_classifier import (
    ErrorCategory, ErrorClassifier, ErrorType, classification_for
)
from ..reliability.rate_limiter import RateLimiter
from ..reliability.retry import RetryExecutor, RetryPolicy
from ..tenancy.pool import BackendInstancePool, HandleFactory
from .catalog import OperationCatalog
from .options import InvokeOptions

logger = logging.getLogger(__name__)

RATE_LIMIT_SUGGESTION = "Please wait before retrying"
CANCELLED_SUGGESTION = "Operation was cancelled before it completed; retry with a longer timeout"
UNKNOWN_OPERATION_SUGGESTION = "Check the operation name against the operation catalog"


def _tenant_id_handle(tenant_id: str) -> str:
    # Without a factory the handle is simply the tenant (project) id
    return tenant_id


class OperationGateway:
    """
    Applies caching, admission control, retries and metrics uniformly across
    all catalog operations.

    All shared state (buckets, cache, metrics, tenant pool) belongs to the
    instance, so several gateways can coexist in one process.
    """

    def __init__(
        self,
        executor: Union[OperationExecutor, OperationRegistry],
        handle_factory: Optional[HandleFactory] = None,
        config: Optional[GatewayConfig] = None,
        catalog: Optional[OperationCatalog] = None,
        *,
        metrics: Optional[MetricsRegistry] = None,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        pool: Optional[BackendInstancePool] = None,
        classifier: type = ErrorClassifier,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None
    ):
        """
        Initialize the gateway.

        Args:
            executor: Performs backend calls; a bare registry is wrapped in
                a ``HandlerExecutor``
            handle_factory: Builds the backend handle for a tenant id
            config: Gateway configuration (defaults apply when omitted)
            catalog: Operation catalog (built-in operations when omitted)
            metrics: Metrics registry to record into
            cache: Response cache
            rate_limiter: Rate limiter
            pool: Tenant handle pool (overrides ``handle_factory``)
            classifier: Error classifier used by the retry executor
            clock: Monotonic clock in seconds shared by every component
            sleep: Backoff sleep coroutine

        Raises:
            ConfigurationError: If the catalog references undeclared
                rate-limit categories or invalid TTLs
        """
        if isinstance(executor, OperationRegistry):
            executor = HandlerExecutor(executor)

        self.config = config or GatewayConfig()
        self.catalog = catalog if catalog is not None else OperationCatalog()
        self.catalog.validate(self.config.rate_limits.keys())

        self._clock = clock or time.monotonic
        self.executor = executor
        self.metrics = metrics if metrics is not None else MetricsRegistry(enabled=self.config.metrics_enabled)
        self.cache = cache if cache is not None else ResponseCache(
            default_ttl_seconds=self.config.cache.default_ttl_seconds,
            enabled=self.config.cache.enabled,
            max_entries=self.config.cache.max_entries,
            sweep_interval_seconds=self.config.cache.sweep_interval_ms / 1000.0,
            clock=self._clock
        )
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(
            self.config.rate_limits, clock=self._clock
        )
        self.pool = pool if pool is not None else BackendInstancePool(handle_factory or _tenant_id_handle)
        self.retry_executor = RetryExecutor(
            policy=RetryPolicy.from_settings(self.config.retry),
            metrics=self.metrics,
            classifier=classifier,
            sleep=sleep,
            clock=self._clock
        )

        logger.debug(
            f"Gateway initialised with {len(self.catalog)} operations across "
            f"{len(self.config.rate_limits)} rate-limit categories"
        )

    @classmethod
    def from_config(
        cls,
        executor: Union[OperationExecutor, OperationRegistry],
        config: Optional[Union[GatewayConfig, Mapping[str, Any]]] = None,
        handle_factory: Optional[HandleFactory] = None,
        catalog_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        **kwargs: Any
    ) -> "OperationGateway":
        """
        Build a gateway from a config object, a raw mapping or the environment.

        With ``config=None`` the configuration is loaded via
        ``GatewayConfig.from_env()``.
        """
        if config is None:
            config = GatewayConfig.from_env()
        elif not isinstance(config, GatewayConfig):
            config = GatewayConfig.from_dict(dict(config))

        catalog = kwargs.pop("catalog", None)
        if catalog is None:
            catalog = OperationCatalog()
        if catalog_overrides:
            catalog = catalog.with_overrides(catalog_overrides)

        return cls(executor, handle_factory, config=config, catalog=catalog, **kwargs)

    async def invoke(
        self,
        op_name: str,
        tenant_id: Optional[str] = None,
        args: Optional[Mapping[str, Any]] = None,
        options: Optional[InvokeOptions] = None
    ) -> OperationResult:
        """
        Run an operation and return its envelope.

        Never raises for operation failures: every failure, including
        unexpected internal faults, comes back as ``success=False`` with a
        classified error.
        """
        options = options or InvokeOptions()
        tenant = self.pool.resolve_tenant(tenant_id)
        op_log = OperationLogger(op_name, tenant)

        try:
            with op_log.track_operation() as tracking:
                result = await self._invoke(op_name, tenant, dict(args or {}), options, op_log)
                tracking['outcome'] = "success" if result.success else result.error.type
                return result
        except Exception as error:
            logger.exception(f"Unexpected error invoking {op_name}")
            classification = classification_for(ErrorCategory.UNKNOWN, ErrorType.GENERIC)
            return OperationResult.fail(
                ErrorDetail.from_classification(classification, error_message(error))
            )

    async def _invoke(
        self,
        op_name: str,
        tenant: str,
        args: Dict[str, Any],
        options: InvokeOptions,
        op_log: OperationLogger
    ) -> OperationResult:
        spec = self.catalog.get(op_name)
        if spec is None:
            op_log.warning("Unknown operation")
            classification = classification_for(
                ErrorCategory.UNKNOWN, ErrorType.GENERIC, UNKNOWN_OPERATION_SUGGESTION
            )
            return OperationResult.fail(
                ErrorDetail.from_classification(classification, f"Unknown operation: {op_name}")
            )

        cache_key = make_cache_key(op_name, args, tenant) if spec.cacheable else None
        if cache_key is not None and not options.bypass_cache:
            entry = self.cache.get_entry(cache_key)
            if entry is not None:
                self.metrics.record_cache_hit()
                op_log.debug("Served from cache")
                return OperationResult.ok(copy.deepcopy(entry.value))
            self.metrics.record_cache_miss()

        try:
            self.rate_limiter.admit(spec.category)
        except RateLimitExceeded as e:
            self.metrics.record_rate_limit_hit(e.category)
            classification = classification_for(
                ErrorCategory.QUOTA, ErrorType.RATE_LIMIT_EXCEEDED, RATE_LIMIT_SUGGESTION
            )
            return OperationResult.fail(
                ErrorDetail.from_classification(classification, str(e), retry_after_ms=e.retry_after_ms)
            )

        deadline = None
        if options.timeout_ms is not None:
            deadline = self._clock() + options.timeout_ms / 1000.0

        async def attempt():
            handle = await self.pool.get(tenant)
            return await self.executor.execute(op_name, handle, args)

        try:
            data = await self.retry_executor.run(
                attempt,
                op_name,
                deadline=deadline,
                cancel_event=options.cancel_event
            )
        except OperationFailedError as e:
            op_log.error(
                "Operation failed",
                error=e.last_error,
                category=e.category,
                type=e.type,
                attempts=e.attempts
            )
            return OperationResult.fail(
                ErrorDetail.from_classification(
                    e.classification, error_message(e.last_error), attempts=e.attempts
                )
            )
        except OperationCancelledError as e:
            classification = classification_for(
                ErrorCategory.UNKNOWN, ErrorType.CANCELLED, CANCELLED_SUGGESTION
            )
            return OperationResult.fail(
                ErrorDetail.from_classification(classification, str(e), attempts=e.attempts)
            )

        if cache_key is not None:
            # Callers own their result; the cache keeps a private copy
            self.cache.put(cache_key, copy.deepcopy(data), spec.ttl_seconds)
        return OperationResult.ok(data)

    def start(self) -> None:
        """Start background maintenance (cache sweeper). Needs a running loop."""
        if self.cache.enabled:
            self.cache.start_sweeper()

    async def shutdown(self) -> None:
        """Stop background tasks and tear down every tenant handle."""
        await self.cache.stop_sweeper()
        await self.pool.close_all()
        logger.info("Gateway shut down")

    async def __aenter__(self) -> "OperationGateway":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    def stats(self) -> Dict[str, Any]:
        """Metrics snapshot plus cache, tenant and bucket state."""
        snapshot = self.metrics.snapshot()
        snapshot["cache_size"] = self.cache.size
        snapshot["tenants"] = len(self.pool)
        snapshot["rate_limits"] = self.rate_limiter.get_state()
        return snapshot

    def list_operations(self) -> List[Dict[str, Any]]:
        return self.catalog.describe()

    def is_cacheable(self, op_name: str) -> bool:
        spec = self.catalog.get(op_name)
        return bool(spec and spec.cacheable)

