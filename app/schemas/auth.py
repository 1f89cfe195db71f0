"""
Jojárts API — Authentication Schemas
======================================

What:  Request/response models for POST /api/auth/login and GET /api/auth/me.

LoginRequest fields are optional on purpose: a missing field must produce
the 400 "Hiányzó felhasználónév vagy jelszó." answer from the login route,
not FastAPI's generic validation response.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: Optional[str] = Field(default=None, description="Administrator username")
    password: Optional[str] = Field(default=None, description="Plain-text password")


class LoginResponse(BaseModel):
    token: str = Field(description="Bearer token, valid for 7 days")
    username: str = Field(description="Username the token was issued to")


class MeResponse(BaseModel):
    """Identity asserted by the presented token (no database lookup)."""
    username: str
    role: str
