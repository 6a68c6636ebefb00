from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OperationSpec(BaseModel):
    """Static catalog entry describing how the gateway treats an operation."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Operation name used by callers")
    category: str = Field(..., min_length=1, description="Rate-limit category")
    cacheable: bool = Field(False, description="Whether successful results may be cached")
    ttl_seconds: Optional[float] = Field(None, alias="defaultTtlSeconds",
                                         description="Cache TTL; None uses the cache default")
    mutating: bool = Field(True, description="Whether the operation changes backend state")
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def default_mutating(cls, data: Any) -> Any:
        # Read-only (cacheable) operations are non-mutating unless stated
        if isinstance(data, dict) and data.get("mutating") is None:
            data = dict(data)
            data["mutating"] = not data.get("cacheable", False)
        return data

    @model_validator(mode="after")
    def check_cacheable(self) -> "OperationSpec":
        if self.mutating and self.cacheable:
            raise ValueError(f"Mutating operation '{self.name}' cannot be cacheable")
        return self
