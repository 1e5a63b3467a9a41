"""
Natours Backend — Shared Response Schemas
===========================================

What:  Envelope, error and health models shared by every resource.

Envelope shapes:
    success:  {"status": "success", "results"?: n, "token"?: "...", "data"?: {...}}
    error:    {"status": "fail" | "error", "message": "..."}
              (development adds "error" and "stack", see app/error_handlers.py)
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Documented shape of every error response (production branch)."""

    status: Literal["fail", "error"] = Field(description="'fail' for 4xx, 'error' for 5xx")
    message: str = Field(description="Human-readable error description")


class DevErrorResponse(ErrorResponse):
    """Error shape returned when ENVIRONMENT=development."""

    error: Dict[str, Any] = Field(description="Raw error details")
    stack: List[str] = Field(default_factory=list, description="Formatted traceback")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    environment: str = Field(description="development or production")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
