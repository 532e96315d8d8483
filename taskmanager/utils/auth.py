"""
Authentication utilities with JWT tokens and bcrypt password hashing.

- bcrypt with a per-hash salt and a fixed work factor
- HS256 signed access tokens carrying ``username`` and ``role``
- UTC timezone consistency

Both classes are built from ``Settings`` once, at application creation.
"""

import asyncio
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from taskmanager.exceptions import (
    ExpiredTokenError,
    InvalidArgumentError,
    InvalidTokenError,
    MalformedTokenError,
)
from taskmanager.models import Role
from taskmanager.schemas import Principal

if TYPE_CHECKING:
    from taskmanager.config import Settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way password hashing with bcrypt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Hash a plain text password using bcrypt."""
        pwd_bytes = password.encode("utf-8")
        if len(pwd_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
            raise InvalidArgumentError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes long"
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed_password = bcrypt.hashpw(password=pwd_bytes, salt=salt)
        return hashed_password.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain text password against a hashed password."""
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            # Not a bcrypt hash, or a password bcrypt refuses to process
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)

    async def dummy_hash_async(self) -> str:
        """
        Hash of a random throwaway password at this hasher's work factor.

        Built on first use and reused. Checking a password against it costs as
        much as a real check and never succeeds.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash_async(secrets.token_urlsafe(16))
        return self._dummy_hash

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PasswordHasher":
        return cls(rounds=settings.bcrypt_rounds)


class TokenService:
    """Issues and verifies signed, time-limited access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=8),
        issuer: str = "taskmanager",
    ):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta
        self.issuer = issuer

    def __repr__(self):
        return f"<TokenService(algorithm='{self.algorithm}', issuer='{self.issuer}')>"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        return cls(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(hours=settings.jwt_expires_hours),
            issuer=settings.jwt_issuer,
        )

    def issue(self, principal: Principal, expires_delta: timedelta | None = None) -> str:
        """Create a JWT access token for the given principal."""
        now = datetime.now(UTC)
        expire = now + (expires_delta if expires_delta is not None else self.expires_delta)
        to_encode = {
            "sub": principal.username,  # "sub" is the standard JWT subject claim
            "username": principal.username,
            "role": principal.role.value,
            "iat": now,
            "exp": expire,
            "iss": self.issuer,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """Decode and verify a JWT access token, returning its principal."""
        try:
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError("Malformed access token") from e

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except ExpiredSignatureError as e:
            raise ExpiredTokenError("Access token has expired") from e
        except JWTError as e:
            raise InvalidTokenError("Invalid access token") from e

        username = payload.get("username")
        role = payload.get("role")
        if not isinstance(username, str) or not username:
            raise MalformedTokenError("Access token carries no username")
        try:
            role = Role(role)
        except ValueError as e:
            raise MalformedTokenError("Access token carries an unknown role") from e

        return Principal(username=username, role=role)
