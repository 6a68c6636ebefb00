"""FastAPI HTTP endpoints for the operation gateway.

Mount the router returned by ``create_router`` on an application:

    app = FastAPI()
    app.include_router(create_router(gateway), prefix="/gateway")
"""

from typing import Any, Dict, Optional

try:
    from fastapi import APIRouter, HTTPException
except ImportError:
    raise ImportError(
        "FastAPI is required for HTTP endpoints. "
        "Please install with: pip install steer-ops-gateway"
    )
from pydantic import BaseModel, Field

from ..gateway.gateway import OperationGateway
from ..gateway.options import InvokeOptions


class InvokeRequest(BaseModel):
    """Body of ``POST /operations/{name}``."""
    tenant: Optional[str] = Field(None, description="Tenant id; the default tenant when omitted")
    args: Dict[str, Any] = Field(default_factory=dict)
    timeout_ms: Optional[float] = Field(None, gt=0)
    bypass_cache: bool = False


def create_router(gateway: OperationGateway) -> APIRouter:
    """Router exposing one gateway instance."""
    router = APIRouter()

    @router.post("/operations/{name}")
    async def invoke_operation(name: str, request: InvokeRequest) -> Dict[str, Any]:
        """Invoke an operation; failures are reported in the envelope, not as HTTP errors."""
        options = InvokeOptions(timeout_ms=request.timeout_ms, bypass_cache=request.bypass_cache)
        result = await gateway.invoke(name, request.tenant, request.args, options)
        return result.to_wire()

    @router.get("/operations")
    async def list_operations():
        return {"operations": gateway.list_operations()}

    @router.get("/operations/{name}")
    async def get_operation(name: str):
        spec = gateway.catalog.get(name)
        if spec is None:
            raise HTTPException(status_code=404, detail=f"Unknown operation: {name}")
        return spec.model_dump(by_alias=True)

    @router.get("/stats")
    async def get_stats():
        return gateway.stats()

    return router
