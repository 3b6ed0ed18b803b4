"""HS256 bearer tokens that point at revocable server-side sessions."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from venturescope.core.exceptions import AuthenticationError

_HEADER = {"alg": "HS256", "typ": "JWT"}
SESSION_TOKEN_USE = "session"


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    session_token: str


def _segment(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unsegment(segment: str) -> dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))


def _signature(signing_input: str, secret: str) -> str:
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    issued_at = _now()
    body = {"iat": issued_at, "exp": issued_at + int(ttl.total_seconds()), "jti": uuid.uuid4().hex, **payload}
    signing_input = f"{_segment(_HEADER)}.{_segment(body)}"
    return f"{signing_input}.{_signature(signing_input, secret)}"


def decode_jwt(token: str, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Verify signature and expiry; every failure surfaces as AuthenticationError."""
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthenticationError("Invalid token format.")
    header_segment, payload_segment, signature = parts
    if not hmac.compare_digest(_signature(f"{header_segment}.{payload_segment}", secret), signature):
        raise AuthenticationError("Invalid token signature.")
    try:
        payload = _unsegment(payload_segment)
    except ValueError as exc:
        raise AuthenticationError("Invalid token payload.") from exc

    if verify_exp:
        if "exp" not in payload:
            raise AuthenticationError("Token is missing exp claim.")
        if int(payload["exp"]) < _now():
            raise AuthenticationError("Token has expired.")
    return payload


def create_session_token(user_id: int, session_token: str, secret: str, ttl_days: int = 30) -> str:
    payload = {"sub": str(user_id), "sid": session_token, "token_use": SESSION_TOKEN_USE}
    return encode_jwt(payload, secret=secret, ttl=timedelta(days=ttl_days))


def read_session_token(token: str, secret: str) -> SessionClaims:
    claims = decode_jwt(token, secret=secret)
    if claims.get("token_use") != SESSION_TOKEN_USE:
        raise AuthenticationError("Invalid auth claims.")
    try:
        return SessionClaims(user_id=int(claims["sub"]), session_token=str(claims["sid"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc
