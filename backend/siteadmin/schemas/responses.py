"""
SiteAdmin Backend - Response Models
===================================

What:  Pydantic models describing what the API returns.
Who:   Route decorators (response_model) and the OpenAPI docs at /docs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SaveResponse(BaseModel):
    """Returned by every POST /api/save-* route."""

    success: bool = Field(default=True)
    message: str = Field(description="Human-readable confirmation, e.g. 'projekt sparade!'")


class SendEmailResponse(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(default="E-post skickat!")


class LoginResponse(BaseModel):
    success: bool = Field(default=True)


class UploadResponse(BaseModel):
    url: str = Field(description="Absolute URL under /uploads where the image is served")


class ErrorResponse(BaseModel):
    """
    Error body shared by all routes.

    Exactly one of `error` (single message) or `errors` (field diagnostics)
    is present.
    """

    error: Optional[str] = Field(default=None, description="User-facing error message")
    errors: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="One entry per failing request field"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Returned by GET /health.

    data_dir / uploads: "ok" when the directory exists and is writable
    mail: "configured" or "not_configured"
    """

    status: str = Field(description="healthy or degraded")
    version: str
    data_dir: str
    uploads: str
    mail: str
    uptime_seconds: float
