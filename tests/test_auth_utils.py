"""
Password hashing and access-token behaviour.
"""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from taskmanager.exceptions import (
    ExpiredTokenError,
    InvalidArgumentError,
    InvalidTokenError,
    MalformedTokenError,
    UnauthorizedError,
)
from taskmanager.models import Role
from taskmanager.schemas import Principal
from taskmanager.utils.auth import PasswordHasher, TokenService


def test_hash_is_salted_and_verifies(password_hasher: PasswordHasher):
    first = password_hasher.hash("Secret123")
    second = password_hasher.hash("Secret123")

    assert first != second
    assert first != "Secret123"
    assert password_hasher.verify("Secret123", first)
    assert password_hasher.verify("Secret123", second)


def test_hash_uses_configured_work_factor(password_hasher: PasswordHasher):
    hashed = password_hasher.hash("Secret123")
    assert hashed.startswith("$2b$04$")


def test_verify_mismatch_returns_false(password_hasher: PasswordHasher):
    hashed = password_hasher.hash("Secret123")
    assert password_hasher.verify("wrong", hashed) is False


def test_verify_against_non_bcrypt_value_returns_false(password_hasher: PasswordHasher):
    assert password_hasher.verify("Secret123", "not-a-bcrypt-hash") is False


def test_hash_rejects_overlong_password(password_hasher: PasswordHasher):
    with pytest.raises(InvalidArgumentError):
        password_hasher.hash("x" * 73)


@pytest.mark.asyncio
async def test_async_variants_match_sync(password_hasher: PasswordHasher):
    hashed = await password_hasher.hash_async("Secret123")
    assert await password_hasher.verify_async("Secret123", hashed)
    assert not await password_hasher.verify_async("Secret124", hashed)


@pytest.mark.asyncio
async def test_dummy_hash_is_reused_and_matches_work_factor(
    password_hasher: PasswordHasher,
):
    dummy = await password_hasher.dummy_hash_async()

    assert dummy.startswith("$2b$04$")
    assert await password_hasher.dummy_hash_async() == dummy
    assert not await password_hasher.verify_async("Secret123", dummy)


def test_issue_and_verify_round_trip(token_service: TokenService):
    principal = Principal(username="alice", role=Role.USER)

    token = token_service.issue(principal)

    assert token_service.verify(token) == principal


def test_token_carries_username_and_role_claims(token_service: TokenService):
    token = token_service.issue(Principal(username="root", role=Role.ADMIN))

    claims = jwt.get_unverified_claims(token)

    assert claims["username"] == "root"
    assert claims["role"] == "admin"
    assert claims["sub"] == "root"
    assert claims["iss"] == "taskmanager"
    assert claims["exp"] > claims["iat"]


def test_expired_token_is_rejected(token_service: TokenService):
    token = token_service.issue(
        Principal(username="alice", role=Role.USER),
        expires_delta=timedelta(seconds=-30),
    )

    with pytest.raises(ExpiredTokenError):
        token_service.verify(token)


def test_token_signed_with_other_key_is_invalid(token_service: TokenService):
    forger = TokenService(secret_key="someone-else")
    token = forger.issue(Principal(username="mallory", role=Role.ADMIN))

    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_token_from_other_issuer_is_invalid(token_service: TokenService):
    other = TokenService(secret_key="test-signing-key", issuer="another-app")
    token = other.issue(Principal(username="alice", role=Role.USER))

    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


@pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
def test_structurally_invalid_token_is_malformed(token_service: TokenService, token):
    with pytest.raises(MalformedTokenError):
        token_service.verify(token)


@pytest.mark.parametrize(
    "claims",
    [
        {"username": "alice"},
        {"role": "user"},
        {"username": "alice", "role": "superuser"},
    ],
)
def test_token_with_incomplete_claims_is_malformed(token_service: TokenService, claims):
    payload = {
        **claims,
        "iss": "taskmanager",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
    }
    token = jwt.encode(payload, "test-signing-key", algorithm="HS256")

    with pytest.raises(MalformedTokenError):
        token_service.verify(token)


def test_token_errors_are_unauthorized():
    for error in (InvalidTokenError, ExpiredTokenError, MalformedTokenError):
        assert issubclass(error, UnauthorizedError)
        assert error("x").status_code == 401


def test_signing_key_not_in_repr(token_service: TokenService):
    assert "test-signing-key" not in repr(token_service)
