"""Security Primitives — tests for password hashing and JWT round trips.

Tests cover:
    - Hashes verify only the original password; malformed hashes fail closed
    - Tokens carry the configured issuer/audience and expire after the lifetime
    - Tampered, expired, foreign-audience and non-integer-subject tokens rejected
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from doconnect.config import Settings
from doconnect.core.errors import UnauthorizedError
from doconnect.infrastructure.security import (
    create_access_token, decode_access_token, hash_password, verify_password,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret_key="unit-test-secret-0123456789abcdef-xyz")


def _issue(settings: Settings, now: datetime | None = None) -> tuple[str, datetime]:
    return create_access_token(
        settings,
        user_id=42,
        user_name="alice",
        email="alice@example.com",
        first_name="Alice",
        last_name="Tester",
        roles=["User", "Admin"],
        now=now,
    )


# ─── Passwords ───────────────────────────────────────────────────

def test_hash_verifies_original_password():
    hashed = hash_password("Passw0rd")
    assert hashed != "Passw0rd"
    assert verify_password("Passw0rd", hashed)
    assert not verify_password("passw0rd", hashed)


def test_malformed_hash_does_not_verify():
    assert verify_password("Passw0rd", "not-a-hash") is False


# ─── Tokens ──────────────────────────────────────────────────────

def test_token_round_trip(settings):
    token, _ = _issue(settings)
    claims = decode_access_token(settings, token)
    assert claims.user_id == 42
    assert claims.user_name == "alice"
    assert claims.email == "alice@example.com"
    assert set(claims.roles) == {"User", "Admin"}
    assert claims.is_admin


def test_token_claims_include_issuer_and_audience(settings):
    token, _ = _issue(settings)
    payload = jwt.get_unverified_claims(token)
    assert payload["iss"] == settings.jwt_issuer
    assert payload["aud"] == settings.jwt_audience
    assert payload["sub"] == "42"


def test_expiration_follows_configured_lifetime(settings):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    _, expiration = _issue(settings, now=now)
    assert expiration == now + timedelta(days=7)


def test_expired_token_rejected(settings):
    token, _ = _issue(settings, now=datetime.now(timezone.utc) - timedelta(days=8))
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(settings, token)
    assert exc.value.message == "Token has expired"


def test_token_signed_with_other_secret_rejected(settings):
    other = Settings(jwt_secret_key="a-completely-different-secret-0123456789")
    token, _ = _issue(other)
    with pytest.raises(UnauthorizedError):
        decode_access_token(settings, token)


def test_wrong_audience_rejected(settings):
    other = Settings(
        jwt_secret_key=settings.jwt_secret_key, jwt_audience="Someone.Else",
    )
    token, _ = _issue(other)
    with pytest.raises(UnauthorizedError):
        decode_access_token(settings, token)


def test_non_integer_subject_rejected(settings):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "sub": "not-a-number",
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "exp": int((now + timedelta(hours=1)).timestamp()),
        },
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(settings, token)
    assert exc.value.message == "Invalid user token"


def test_garbage_token_rejected(settings):
    with pytest.raises(UnauthorizedError):
        decode_access_token(settings, "abc.def.ghi")
