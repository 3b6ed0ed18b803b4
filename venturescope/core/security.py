"""Security primitives for password and session-token workflows."""

from __future__ import annotations

import hashlib
import hmac
import secrets

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 260_000


def hash_password(password: str, salt: str | None = None, iterations: int = _ITERATIONS) -> str:
    """Return an encoded PBKDF2 hash in ``algorithm$iterations$salt$digest`` form."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, hashed_password: str) -> bool:
    """Constant-time comparison for hashed password values."""
    try:
        algorithm, iterations, salt, _ = hashed_password.split("$", 3)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    candidate = hash_password(password=password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate, hashed_password)


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)
