"""
Jojárts API — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for every failure the API knows about.
How:   Each exception carries a user-facing message and an optional context
       dict. Services raise them; the global handlers registered in
       app.main turn request-time errors into JSON bodies of the form
       {"message": "..."}. Startup errors are never caught: they stop the
       process.

Exception Hierarchy:
    JojartsError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized (missing or invalid token)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    ├── InvalidTokenError        (token service; mapped to UnauthorizedError)
    ├── DuplicateKeyError        (credential store; handled by bootstrap)
    ├── ConfigurationError       (fatal at startup)
    └── StorageUnavailableError  (fatal at startup)

Messages are in Hungarian because the frontend shows them verbatim.
"""

from typing import Any, Dict, Optional


# ── User-facing messages ──────────────────────────────────────────────────
MSG_MISSING_TOKEN = "Hiányzó token."
MSG_INVALID_TOKEN = "Érvénytelen token."
MSG_MISSING_CREDENTIALS = "Hiányzó felhasználónév vagy jelszó."
MSG_BAD_CREDENTIALS = "Hibás felhasználónév vagy jelszó."
MSG_MISSING_IMAGE_URL = "Hiányzó kép URL."
MSG_IMAGE_NOT_FOUND = "Kép nem található."
MSG_INVALID_REQUEST = "Érvénytelen kérés."
MSG_SERVER_ERROR = "Váratlan szerverhiba történt. Kérjük, próbáld újra később."


class JojartsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JojartsError):
    """
    Raised when client input fails validation.

    When:    Missing login fields, missing or empty image URL.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = MSG_INVALID_REQUEST,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(JojartsError):
    """
    Raised when a protected endpoint is called without a usable credential.

    Two flavours share the 401 status but carry different messages:
        missing:  no "Authorization: Bearer <token>" header
        invalid:  token present but rejected by the token service
    Bad login credentials also use this class.
    """

    def __init__(
        self,
        message: str = MSG_INVALID_TOKEN,
        reason: str = "invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason

    @classmethod
    def missing(cls) -> "UnauthorizedError":
        return cls(message=MSG_MISSING_TOKEN, reason="missing")

    @classmethod
    def invalid(cls, detail: Optional[str] = None) -> "UnauthorizedError":
        return cls(
            message=MSG_INVALID_TOKEN,
            reason="invalid",
            context={"detail": detail} if detail else None,
        )


class NotFoundError(JojartsError):
    """
    Raised when an operation targets an identifier that does not exist.

    Malformed identifiers are reported the same way: from the client's
    point of view there is simply no such record.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = MSG_IMAGE_NOT_FOUND,
        resource: str = "image",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(JojartsError):
    """
    Raised when a client exceeds the login attempt rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Túl sok bejelentkezési kísérlet. Próbáld újra {retry_after} másodperc múlva."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(JojartsError):
    """
    Raised when a storage operation fails unexpectedly during a request.

    The client always gets a generic message; the original error type is
    kept in context for the server log only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = MSG_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(JojartsError):
    """
    Raised by TokenService.verify() for a bad signature, a malformed token,
    missing claims or an expired token.

    Not an HTTP error by itself: the auth dependency translates it into
    UnauthorizedError.invalid().
    """

    def __init__(
        self,
        message: str = "Token verification failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateKeyError(JojartsError):
    """
    Raised when an insert violates a uniqueness constraint.

    The credential store raises it when two processes race to create the
    bootstrap administrator; the loser treats it as "already bootstrapped".
    """

    def __init__(
        self,
        message: str = "Duplicate key",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message=message, context=ctx)
        self.key = key


class ConfigurationError(JojartsError):
    """
    Raised when required configuration is absent or unusable.

    Fatal: raised while the application is being built, so the process
    never starts serving.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageUnavailableError(JojartsError):
    """
    Raised when the database cannot be reached during startup.

    Fatal: the lifespan logs it and re-raises, and uvicorn exits. There is
    no retry loop.
    """

    def __init__(
        self,
        message: str = "Storage is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
