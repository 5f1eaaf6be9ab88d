"""
Base response schemas shared by every endpoint.

Errors always use the same envelope:
``{"error": {"code", "message"}, "success": false, "request_id"}``.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Extra context")


class ErrorResponse(BaseModel):
    error: ErrorDetail
    success: bool = False
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
