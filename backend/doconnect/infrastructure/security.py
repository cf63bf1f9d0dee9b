"""Security Primitives — password hashing and JWT issuance/verification.

Invariants:
    - Plain passwords never leave this module; only hashes are persisted
    - Tokens are HS256, carry sub (user id as str), roles, iss, aud, exp
    - decode_access_token raises UnauthorizedError for every invalid token,
      including expired ones and a non-integer sub

Design Decisions:
    - pbkdf2_sha256 via passlib CryptContext: no native extension required
    - Settings passed in explicitly so tests can sign tokens with their own secret
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from doconnect.config import Settings
from doconnect.core.domain_types import RoleName
from doconnect.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # malformed or unknown hash format
        return False


@dataclass(frozen=True)
class TokenClaims:
    """Identity extracted from a verified access token."""
    user_id: int
    user_name: str = ""
    email: str = ""
    roles: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return RoleName.ADMIN.value in self.roles


def create_access_token(
    settings: Settings,
    user_id: int,
    user_name: str,
    email: str,
    first_name: str,
    last_name: str,
    roles: list[str],
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Sign a token for the user. Returns (token, expiration)."""
    issued_at = now or datetime.now(timezone.utc)
    expiration = issued_at + timedelta(days=settings.jwt_expiration_days)
    payload = {
        "sub": str(user_id),
        "name": user_name,
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "roles": [r for r in roles if r],
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(issued_at.timestamp()),
        "exp": int(expiration.timestamp()),
    }
    token = jwt.encode(
        payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm,
    )
    return token, expiration


def decode_access_token(settings: Settings, token: str) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise UnauthorizedError("Token has expired")
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise UnauthorizedError("Invalid user token")

    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid user token")

    return TokenClaims(
        user_id=user_id,
        user_name=payload.get("name", ""),
        email=payload.get("email", ""),
        roles=tuple(payload.get("roles") or ()),
    )
