from __future__ import annotations

from datetime import timedelta

import pytest

from venturescope.auth.jwt import create_session_token, decode_jwt, encode_jwt
from venturescope.auth.rbac import has_scopes, is_admin_role, require_scopes
from venturescope.auth.tenant_context import OrgContext, enforce_org_match, from_membership
from venturescope.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from venturescope.core.security import hash_password, verify_password


def test_session_token_roundtrip_contains_required_claims():
    token = create_session_token(user_id=10, session_token="abc123", secret="test-secret")
    claims = decode_jwt(token, secret="test-secret")
    assert claims["sub"] == "10"
    assert claims["sid"] == "abc123"
    assert claims["token_use"] == "session"
    assert "exp" in claims
    assert "iat" in claims
    assert "jti" in claims


def test_decode_rejects_tampered_signature():
    token = create_session_token(user_id=1, session_token="s", secret="test-secret")
    with pytest.raises(AuthenticationError):
        decode_jwt(token, secret="other-secret")


def test_decode_rejects_expired_token():
    token = encode_jwt({"sub": "1"}, secret="test-secret", ttl=timedelta(seconds=-10))
    with pytest.raises(AuthenticationError, match="expired"):
        decode_jwt(token, secret="test-secret")


def test_decode_rejects_malformed_token():
    with pytest.raises(AuthenticationError):
        decode_jwt("not-a-jwt", secret="test-secret")


def test_password_hash_verifies_only_the_original_password():
    hashed = hash_password("s3cret-pass", iterations=1000)
    assert hashed.startswith("pbkdf2_sha256$1000$")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)
    assert not verify_password("s3cret-pass", "garbage")


def test_rbac_member_lacks_admin_scopes():
    require_scopes("member", ["companies.write", "ic_rounds.vote"])
    with pytest.raises(AuthorizationError):
        require_scopes("member", ["submissions.review"])


def test_rbac_owner_wildcard_and_admin_scopes():
    assert has_scopes("owner", ["billing.manage", "anything.at.all"])
    assert has_scopes("admin", ["submissions.review", "team.invite", "ic_rounds.manage"])
    assert not has_scopes("unknown", ["companies.write"])


def test_is_admin_role():
    assert is_admin_role("owner")
    assert is_admin_role("ADMIN")
    assert not is_admin_role("member")


def test_org_context_requires_membership():
    with pytest.raises(AuthorizationError):
        from_membership(None, 1, None)
    context = from_membership(5, 1, "Admin")
    assert context == OrgContext(org_id=5, user_id=1, role="admin")


def test_foreign_org_rows_look_missing():
    context = OrgContext(org_id=1, user_id=1, role="owner")
    enforce_org_match(1, context)
    with pytest.raises(NotFoundError, match="Company not found"):
        enforce_org_match(2, context, label="Company")


def test_read_session_token_rejects_non_session_tokens():
    from venturescope.auth.jwt import read_session_token

    token = encode_jwt({"sub": "1", "token_use": "refresh"}, secret="test-secret", ttl=timedelta(minutes=5))
    with pytest.raises(AuthenticationError, match="Invalid auth claims"):
        read_session_token(token, secret="test-secret")

    claims = read_session_token(create_session_token(5, "sid-5", secret="test-secret"), secret="test-secret")
    assert (claims.user_id, claims.session_token) == (5, "sid-5")
