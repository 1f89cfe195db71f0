"""
Jojárts API — Bearer Token Authorization
==========================================

What:  Gate for the endpoints that need an administrator.
How:   A FastAPI dependency rather than a Starlette middleware, because it
       wraps only some routes:
           GET    /api/auth/me
           POST   /api/images
           PUT    /api/images/{id}
           DELETE /api/images/{id}
       Login, health and the public image list stay open.

Flow:
    Authorization header ──▶ "Bearer <token>"? ──no──▶ 401 "Hiányzó token."
                                   │ yes
                                   ▼
                         TokenService.verify() ──fail──▶ 401 "Érvénytelen token."
                                   │ ok
                                   ▼
                 request.state.admin = claims ──▶ route handler
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from app.exceptions import InvalidTokenError, UnauthorizedError
from app.middleware.request_id import request_id_var
from app.services.token_service import TokenClaims, TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value.

    Returns None unless the value starts with "Bearer " and has something
    after it. The scheme match is case-sensitive.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def require_admin(
    request: Request,
    authorization: Optional[str] = Header(default=None, include_in_schema=False),
    token_service: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Resolve the caller's verified identity or reject the request.

    Raises:
        UnauthorizedError.missing(): no usable bearer credential
        UnauthorizedError.invalid(): token failed verification (bad
            signature, malformed, or expired)
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError.missing()

    try:
        claims = token_service.verify(token)
    except InvalidTokenError as e:
        # Never log the token itself
        logger.warning(
            "[%s] Rejected bearer token on %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            e.context.get("reason", "invalid"),
        )
        raise UnauthorizedError.invalid(detail=e.context.get("reason")) from e

    request.state.admin = claims
    return claims
