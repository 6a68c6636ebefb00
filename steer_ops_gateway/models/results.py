"""
Result envelope returned by every gateway invocation.

The wire shape is a stable contract for downstream automation:
``{success, data?, error?: {category, type, suggestion, message}}``.
Optional diagnostic fields (``retryAfterMs``, ``attempts``) are emitted only
when set.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..reliability.error_classifier import ErrorClassification


class ErrorDetail(BaseModel):
    """Error half of the envelope."""
    model_config = ConfigDict(populate_by_name=True)

    category: str
    type: str
    suggestion: str
    message: str
    retry_after_ms: Optional[int] = Field(None, alias="retryAfterMs")
    attempts: Optional[int] = None

    @classmethod
    def from_classification(
        cls,
        classification: ErrorClassification,
        message: str,
        **extra: Any
    ) -> "ErrorDetail":
        return cls(
            category=classification.category.value,
            type=classification.type.value,
            suggestion=classification.suggestion,
            message=message,
            **extra
        )


class OperationResult(BaseModel):
    """Uniform success/error envelope."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ErrorDetail) -> "OperationResult":
        return cls(success=False, error=error)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the downstream wire format."""
        payload: Dict[str, Any] = {"success": self.success}
        if self.success:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error.model_dump(by_alias=True, exclude_none=True)
        return payload
