"""
Jojárts API — Shared Response Schemas
=======================================

Every error the API returns has exactly one field, `message`, which the
frontend shows to the user as-is.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    ok: bool = Field(default=True, description="Always true while the process serves requests")
