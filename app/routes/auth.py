"""
Jojárts API — Authentication Route Handlers
=============================================

What:  POST /api/auth/login (open) and GET /api/auth/me (bearer).
How:   Login checks the pair with CredentialStore and signs a token with
       TokenService. /me echoes the identity carried by the verified token;
       it does not read the database.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import (
    MSG_BAD_CREDENTIALS,
    MSG_MISSING_CREDENTIALS,
    UnauthorizedError,
    ValidationError,
)
from app.middleware.auth import get_token_service, require_admin
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse
from app.schemas.common import ErrorResponse
from app.services.credential_store import CredentialStore
from app.services.token_service import TokenClaims, TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Wrong username or password", "model": ErrorResponse},
        429: {"description": "Too many login attempts", "model": ErrorResponse},
    },
    summary="Exchange admin credentials for a bearer token",
)
async def login(
    body: Optional[LoginRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    credential_store: CredentialStore = Depends(get_credential_store),
    token_service: TokenService = Depends(get_token_service),
) -> LoginResponse:
    """
    Verify username/password and issue a 7-day token.

    Unknown user and wrong password get the same 401 answer.
    """
    if body is None or not body.username or not body.password:
        raise ValidationError(message=MSG_MISSING_CREDENTIALS)

    admin = await credential_store.authenticate(db, body.username, body.password)
    if admin is None:
        logger.warning("Failed login for username '%s'", body.username)
        raise UnauthorizedError(message=MSG_BAD_CREDENTIALS, reason="credentials")

    token = token_service.issue(
        TokenClaims(subject_id=str(admin.id), username=admin.username, role=admin.role)
    )
    logger.info("Admin '%s' logged in", admin.username)
    return LoginResponse(token=token, username=admin.username)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Identity of the presented token",
)
async def me(claims: TokenClaims = Depends(require_admin)) -> MeResponse:
    return MeResponse(username=claims.username, role=claims.role)
