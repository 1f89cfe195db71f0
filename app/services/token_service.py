"""
Jojárts API — Token Service
=============================

What:  Issues and verifies signed, time-limited bearer tokens (JWT, HS256).
How:   python-jose signs the claims with the process-wide secret. Verification
       checks signature, structure, required claims and expiry.
Who:   The login route issues; the auth dependency verifies.

Claims layout:
    sub       administrator id (string)
    username  administrator username
    role      administrator role ("admin")
    iat       issued-at (seconds since epoch)
    exp       expiry, iat + token_ttl_days (default 7 days)

Scope limitation:
    Verification is stateless. There is no denylist and no storage lookup,
    so a leaked token stays valid until its exp. Rotating JWT_SECRET
    invalidates every outstanding token at once.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings
from app.exceptions import ConfigurationError, InvalidTokenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a token."""

    subject_id: str
    username: str
    role: str
    expires_at: Optional[datetime] = None


class TokenService:
    """
    Stateless JWT issuer/verifier bound to one secret.

    The secret is fixed at construction; an empty secret is a configuration
    error, not something to discover at the first login.
    """

    DEFAULT_TTL = timedelta(days=7)

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TTL,
    ):
        if not secret:
            raise ConfigurationError(
                message="JWT_SECRET must be set to issue tokens",
                context={"missing": ["JWT_SECRET"]},
            )
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.token_ttl_days),
        )

    def issue(self, claims: TokenClaims, now: Optional[datetime] = None) -> str:
        """
        Sign a token for the given identity.

        Args:
            claims: subject id, username and role to embed
                    (claims.expires_at is ignored; expiry is always now + ttl)
            now:    issuance instant, defaults to the current UTC time

        Returns:
            The compact JWT string.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(claims.subject_id),
            "username": claims.username,
            "role": claims.role,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Validate a token and return its claims.

        Raises:
            InvalidTokenError: bad signature, malformed token, missing
                claims, or expired. context["reason"] says which, for logs.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise InvalidTokenError(message="Token expired", context={"reason": "expired"}) from e
        except JWTError as e:
            raise InvalidTokenError(
                message="Token signature or format invalid",
                context={"reason": "invalid"},
            ) from e

        subject_id = payload.get("sub")
        username = payload.get("username")
        role = payload.get("role")
        exp = payload.get("exp")
        if not subject_id or not username or not role or exp is None:
            raise InvalidTokenError(
                message="Token is missing required claims",
                context={"reason": "claims"},
            )

        return TokenClaims(
            subject_id=str(subject_id),
            username=str(username),
            role=str(role),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
