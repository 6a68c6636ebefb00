"""
Structured logging utility for gateway operations.

Keeps a consistent ``[operation=... tenant=...]`` prefix on every line so
log searches by operation or tenant work without a JSON log pipeline.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional


class OperationLogger:
    """Structured logger bound to one operation and tenant."""

    def __init__(self, op_name: str, tenant_id: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize logger for a specific operation.

        Args:
            op_name: Operation name (e.g. "listUsers")
            tenant_id: Tenant the operation runs against
            logger: Underlying logger (defaults to ``steer_ops_gateway.operations``)
        """
        self.op_name = op_name
        self.tenant_id = tenant_id
        self.logger = logger or logging.getLogger("steer_ops_gateway.operations")

    def _format_message(self, message: str, **kwargs) -> str:
        fields = [f"operation={self.op_name}"]
        if self.tenant_id:
            fields.append(f"tenant={self.tenant_id}")

        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")

        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs):
        """Log error message, appending the exception type and text if given."""
        if error is not None:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)[:200]
        self.logger.error(self._format_message(message, **kwargs))

    @contextmanager
    def track_operation(self, request_id: Optional[str] = None):
        """
        Context manager to time an invocation and log start/finish.

        Yields:
            Dict with request metadata including request_id
        """
        if request_id is None:
            request_id = str(uuid.uuid4())[:8]

        start_time = time.time()
        self.debug("Starting invocation", request_id=request_id)

        metadata: Dict[str, Any] = {
            'request_id': request_id,
            'operation': self.op_name,
            'tenant': self.tenant_id,
            'start_time': start_time,
        }

        try:
            yield metadata

            duration = time.time() - start_time
            self.info(
                "Completed invocation",
                request_id=request_id,
                duration_ms=int(duration * 1000),
                outcome=metadata.get('outcome')
            )

        except Exception as e:
            duration = time.time() - start_time
            self.error(
                "Failed invocation",
                request_id=request_id,
                duration_ms=int(duration * 1000),
                error=e
            )
            raise


def configure_logging(level: str = "INFO") -> None:
    """Basic console logging for CLI use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
