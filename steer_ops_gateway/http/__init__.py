"""HTTP endpoints for the operation gateway.

This module requires FastAPI to be installed.
"""

from .api import InvokeRequest, create_router

__all__ = ["create_router", "InvokeRequest"]
