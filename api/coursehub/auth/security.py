"""Password hashes and bearer tokens.

Passwords are stored as Argon2id hashes. Access tokens are HMAC-signed JWTs
whose ``sub`` is the user id and whose ``role`` claim lets permission checks
run without a database read.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from jose import JWTError, jwt

from coursehub.config.settings import get_settings


TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ("sub", "role")

# OWASP minimum for Argon2id: m=19 MiB, t=2, p=1
_hasher = PasswordHasher(
    time_cost=2,
    memory_cost=19 * 1024,
    parallelism=1,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> tuple[bool, str | None]:
    """Check ``password`` against a stored hash.

    The second element is a fresh hash when the stored one was made with
    older hasher parameters, so the caller can persist the upgrade.
    """
    try:
        _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False, None

    if _hasher.check_needs_rehash(password_hash):
        return True, hash_password(password)
    return True, None


def create_access_token(
    claims: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    lifetime = expires_delta or timedelta(
        minutes=settings.auth_access_token_expire_minutes
    )
    issued_at = datetime.now(UTC)
    payload = {
        **claims,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Return the claims of a valid access token.

    Raises JWTError for a bad signature, an expired token, a token of
    another type or one lacking the subject or role claim.
    """
    settings = get_settings()
    claims = jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])

    if claims.get("type") != TOKEN_TYPE:
        raise JWTError(f"expected a token of type {TOKEN_TYPE!r}")
    missing = [name for name in REQUIRED_CLAIMS if name not in claims]
    if missing:
        raise JWTError(f"token lacks claims: {', '.join(missing)}")
    return claims
