"""
Bounded exponential-backoff retry for backend operations.

Per call the executor walks a small state machine:

- attempt n succeeds: return the result
- the failure classifies as non-retryable (Authentication, AccessDenied,
  InvalidInput): stop after this attempt
- retryable and n < max_retries: sleep min(base * 2**n, max) then attempt n+1
- retryable and n == max_retries: terminal failure

Terminal failures are raised as ``OperationFailedError`` carrying the
classification and attempt count. A deadline or cancel event stops the loop
between attempts and raises ``OperationCancelledError``.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from ..errors import OperationCancelledError, OperationFailedError, error_message
from ..observability.metrics import MetricsRegistry
from .error_classifier import ErrorClassification, ErrorClassifier

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class RetryPolicy:
    """Retry limits and backoff schedule."""
    max_retries: int = 3
    base_delay_ms: float = 1000.0
    max_delay_ms: float = 30000.0
    jitter_ratio: float = 0.0

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            base_delay_ms=settings.base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            jitter_ratio=getattr(settings, "jitter_ratio", 0.0),
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_ms(self, attempt: int) -> float:
        """Un-jittered delay after the zero-based ``attempt`` failed."""
        return min(self.base_delay_ms * (2 ** attempt), self.max_delay_ms)


@dataclass
class RetryState:
    """Tracks one ``run`` call."""
    attempts: int = 0
    delays_ms: List[float] = field(default_factory=list)
    errors: List[BaseException] = field(default_factory=list)
    classifications: List[ErrorClassification] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    @property
    def total_delay_ms(self) -> float:
        return sum(self.delays_ms)

    def add_failure(self, error: BaseException, classification: ErrorClassification):
        self.errors.append(error)
        self.classifications.append(classification)

    def get_last_error(self) -> Optional[BaseException]:
        return self.errors[-1] if self.errors else None


class _AttemptDeadline(Exception):
    """Internal marker: the deadline expired while an attempt was in flight."""


class RetryExecutor:
    """
    Runs an async callable with classification-aware retries.

    Every attempt, successful or not, is recorded in the metrics registry
    with its elapsed time.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        metrics: Optional[MetricsRegistry] = None,
        classifier: type = ErrorClassifier,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the executor.

        Args:
            policy: Retry limits and backoff schedule
            metrics: Registry fed with one record per attempt
            classifier: Object exposing ``classify(error)``
            sleep: Coroutine used for backoff waits, in seconds
            clock: Monotonic clock in seconds
            rng: Random source in [0, 1) used for jitter
        """
        self.policy = policy or RetryPolicy()
        self.metrics = metrics or MetricsRegistry()
        self.classifier = classifier
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._rng = rng or random.random

    async def run(
        self,
        func: Callable[[], Awaitable[T]],
        op_name: str,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> T:
        """
        Execute ``func`` with retries.

        Args:
            func: Zero-argument callable returning an awaitable
            op_name: Operation name for metrics and logs
            deadline: Absolute ``clock()`` time after which no new attempt starts
            cancel_event: Setting this event stops the loop between attempts

        Returns:
            Result of the first successful attempt

        Raises:
            OperationFailedError: Non-retryable failure or retries exhausted
            OperationCancelledError: Deadline reached or cancel event set
        """
        state = RetryState(start_time=self._clock())
        attempt = 0

        while True:
            self._check_cancelled(op_name, state, deadline, cancel_event)

            start = self._clock()
            state.attempts += 1
            try:
                result = await self._attempt(func, deadline)
            except _AttemptDeadline:
                self._record(op_name, start, MetricsRegistry.OUTCOME_CANCELLED)
                raise self._cancelled(op_name, state, "deadline exceeded")
            except Exception as error:  # noqa: BLE001
                self._record(op_name, start, MetricsRegistry.OUTCOME_FAILURE)
                classification = self.classifier.classify(error)
                state.add_failure(error, classification)
                self.metrics.record_error(classification.category.value)

                logger.warning(
                    f"Operation {op_name} failed on attempt {attempt + 1}",
                    extra={
                        "operation": op_name,
                        "attempt": attempt + 1,
                        "error": error_message(error)[:200],
                        "category": classification.category.value,
                        "type": classification.type.value,
                        "suggestion": classification.suggestion,
                    }
                )

                if not classification.is_retryable or attempt >= self.policy.max_retries:
                    raise self._terminal(op_name, state, error, classification) from error

                delay_ms = self._delay_ms(attempt)
                if deadline is not None and self._clock() + delay_ms / 1000.0 >= deadline:
                    self._record_cancel(op_name)
                    raise self._cancelled(op_name, state, "deadline exceeded") from error

                state.delays_ms.append(delay_ms)
                logger.info(f"Retrying {op_name} in {delay_ms:.0f}ms...")
                if await self._wait(delay_ms / 1000.0, cancel_event):
                    self._record_cancel(op_name)
                    raise self._cancelled(op_name, state, "cancelled") from error

                attempt += 1
                continue

            self._record(op_name, start, MetricsRegistry.OUTCOME_SUCCESS)
            if attempt > 0:
                logger.info(
                    f"Operation {op_name} succeeded on retry attempt {attempt + 1}",
                    extra={
                        "operation": op_name,
                        "attempts": state.attempts,
                        "total_delay_ms": state.total_delay_ms,
                    }
                )
            return result

    async def _attempt(self, func: Callable[[], Awaitable[T]], deadline: Optional[float]) -> T:
        if deadline is None:
            return await func()

        remaining = deadline - self._clock()
        if remaining <= 0:
            raise _AttemptDeadline()

        task = asyncio.ensure_future(func())
        try:
            done, _ = await asyncio.wait({task}, timeout=remaining)
        except asyncio.CancelledError:
            # Caller went away: take the backend call down with it
            task.cancel()
            raise
        if not done:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:  # noqa: BLE001
                logger.debug("Abandoned attempt raised after cancellation", exc_info=True)
            raise _AttemptDeadline()
        return task.result()

    async def _wait(self, delay_s: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep for the backoff delay; True if the cancel event fired first."""
        if cancel_event is None:
            await self._sleep(delay_s)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay_s)
        except asyncio.TimeoutError:
            return False
        return True

    def _delay_ms(self, attempt: int) -> float:
        delay = self.policy.backoff_ms(attempt)
        if self.policy.jitter_ratio > 0:
            spread = (self._rng() * 2 - 1) * self.policy.jitter_ratio
            delay = delay * (1 + spread)
        return max(0.0, min(delay, self.policy.max_delay_ms))

    def _check_cancelled(
        self,
        op_name: str,
        state: RetryState,
        deadline: Optional[float],
        cancel_event: Optional[asyncio.Event]
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._record_cancel(op_name)
            raise self._cancelled(op_name, state, "cancelled")
        if deadline is not None and self._clock() >= deadline:
            self._record_cancel(op_name)
            raise self._cancelled(op_name, state, "deadline exceeded")

    def _record(self, op_name: str, start: float, outcome: str) -> None:
        elapsed_ms = (self._clock() - start) * 1000.0
        self.metrics.record_invocation(
            op_name,
            elapsed_ms,
            outcome == MetricsRegistry.OUTCOME_SUCCESS,
            outcome=outcome
        )

    def _record_cancel(self, op_name: str) -> None:
        # Cancelled between attempts: nothing ran, so count and latency stay put
        self.metrics.record_cancellation(op_name)

    def _terminal(
        self,
        op_name: str,
        state: RetryState,
        error: BaseException,
        classification: ErrorClassification
    ) -> OperationFailedError:
        logger.error(
            f"Operation {op_name} failed permanently after {state.attempts} attempt(s)",
            extra={
                "operation": op_name,
                "attempts": state.attempts,
                "category": classification.category.value,
                "type": classification.type.value,
                "retryable": classification.is_retryable,
            }
        )
        return OperationFailedError(op_name, classification, state.attempts, error)

    def _cancelled(self, op_name: str, state: RetryState, reason: str) -> OperationCancelledError:
        # attempts counts only attempts that actually ran to an outcome
        completed = len(state.errors)
        logger.warning(
            f"Operation {op_name} {reason}",
            extra={"operation": op_name, "attempts": completed, "reason": reason}
        )
        return OperationCancelledError(op_name, completed, reason)
