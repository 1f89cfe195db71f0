"""
Jojárts API — Token Service Unit Tests
========================================

What we test:
    ✅ issue → verify round trip carries subject, username, role
    ✅ expiry is 7 days after issuance; expired tokens are rejected
    ✅ tampered, foreign-secret, malformed and claim-less tokens are rejected
    ✅ an empty secret is a configuration error
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.exceptions import ConfigurationError, InvalidTokenError
from app.services.token_service import TokenClaims, TokenService

from tests.conftest import TEST_SECRET, make_settings

CLAIMS = TokenClaims(subject_id="5f2b0c1e-0000-4000-8000-000000000001", username="admin", role="admin")


class TestTokenRoundTrip:

    def test_verify_returns_issued_claims(self, token_service):
        token = token_service.issue(CLAIMS)

        claims = token_service.verify(token)

        assert claims.subject_id == CLAIMS.subject_id
        assert claims.username == "admin"
        assert claims.role == "admin"

    def test_expiry_is_seven_days_after_issuance(self, token_service):
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)

        claims = token_service.verify(token_service.issue(CLAIMS, now=issued_at))

        assert claims.expires_at == issued_at + timedelta(days=7)

    def test_token_just_before_expiry_is_valid(self, token_service):
        issued_at = datetime.now(timezone.utc) - timedelta(days=7) + timedelta(minutes=5)

        claims = token_service.verify(token_service.issue(CLAIMS, now=issued_at))

        assert claims.username == "admin"

    def test_expired_token_is_rejected(self, token_service):
        issued_at = datetime.now(timezone.utc) - timedelta(days=7, seconds=10)
        token = token_service.issue(CLAIMS, now=issued_at)

        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_ttl_comes_from_settings(self, sqlite_url):
        service = TokenService.from_settings(make_settings(sqlite_url, token_ttl_days=1))
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)

        claims = service.verify(service.issue(CLAIMS, now=issued_at))

        assert claims.expires_at == issued_at + timedelta(days=1)


class TestTokenRejection:

    def test_token_signed_with_other_secret_is_rejected(self, token_service):
        foreign = TokenService(secret="some-other-secret").issue(CLAIMS)

        with pytest.raises(InvalidTokenError):
            token_service.verify(foreign)

    def test_tampered_payload_is_rejected(self, token_service):
        header, payload, signature = token_service.issue(CLAIMS).split(".")
        forged_payload = jwt.encode(
            {"sub": "x", "username": "mallory", "role": "admin",
             "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "whatever",
        ).split(".")[1]

        with pytest.raises(InvalidTokenError):
            token_service.verify(".".join([header, forged_payload, signature]))

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "Bearer abc"])
    def test_malformed_token_is_rejected(self, token_service, garbage):
        with pytest.raises(InvalidTokenError):
            token_service.verify(garbage)

    def test_missing_claims_are_rejected(self, token_service):
        token = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.context["reason"] == "claims"

    def test_token_without_expiry_is_rejected(self, token_service):
        token = jwt.encode({"sub": "1", "username": "admin", "role": "admin"}, TEST_SECRET)

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)


def test_empty_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        TokenService(secret="")
