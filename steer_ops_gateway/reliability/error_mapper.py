"""
Error mapping utilities for operation executors.

Converts foreign exceptions (SDK errors, transport errors, subprocess
failures) into the structured ``BackendError`` the classifier consumes.
"""

import asyncio
import subprocess
from typing import Optional

import httpx

from ..errors import BackendError, error_message


class ErrorMapper:
    """Maps arbitrary exceptions to ``BackendError``."""

    @staticmethod
    def to_backend_error(error: BaseException) -> BackendError:
        """
        Build a ``BackendError`` from any exception.

        Args:
            error: The exception to map

        Returns:
            BackendError carrying the best code/status we could recover
        """
        if isinstance(error, BackendError):
            return error

        message = error_message(error)
        code = ErrorMapper.get_code(error)
        status_code = ErrorMapper.get_status_code(error)

        return BackendError(
            message=message,
            code=code,
            status_code=status_code,
            retry_after=ErrorMapper.get_retry_after(error),
            original_error=error
        )

    @staticmethod
    def get_code(error: BaseException) -> Optional[str]:
        """Recover a backend/socket error code from an exception."""
        # Transport errors first; httpx timeouts are not builtin TimeoutError
        if isinstance(error, httpx.TimeoutException):
            return 'ETIMEDOUT'
        if isinstance(error, (httpx.ConnectError, httpx.RemoteProtocolError)):
            return 'ECONNRESET'
        if isinstance(error, ConnectionResetError):
            return 'ECONNRESET'
        if isinstance(error, ConnectionRefusedError):
            return 'ECONNREFUSED'
        if isinstance(error, BrokenPipeError):
            return 'EPIPE'
        if isinstance(error, subprocess.TimeoutExpired):
            return 'ETIMEDOUT'
        if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
            return 'deadline-exceeded'

        code = getattr(error, 'code', None)
        if isinstance(code, str) and code:
            return code
        return None

    @staticmethod
    def get_status_code(error: BaseException) -> Optional[int]:
        """Recover an HTTP status code from an exception."""
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code

        status_code = getattr(error, 'status_code', None)
        if isinstance(status_code, int):
            return status_code

        response = getattr(error, 'response', None)
        status_code = getattr(response, 'status_code', None)
        if isinstance(status_code, int):
            return status_code
        return None

    @staticmethod
    def get_retry_after(error: BaseException) -> Optional[float]:
        """
        Extract retry-after value from error if available.

        Args:
            error: The exception to check

        Returns:
            Optional[float]: Seconds to wait before retry, or None
        """
        response = getattr(error, 'response', None)
        headers = getattr(response, 'headers', None)
        if headers is not None:
            retry_after = headers.get('Retry-After')
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass

        retry_after = getattr(error, 'retry_after', None)
        if isinstance(retry_after, (int, float)):
            return float(retry_after)
        return None
