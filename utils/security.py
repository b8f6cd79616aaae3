"""
security helpers:
- Argon2 hashing for passwords and refresh credentials via argon2-cffi
- Access/refresh JWT creation and verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from utils.exceptions import ConfigurationError, InvalidToken

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class Identity:
    """Who a token speaks for: user id plus display handle."""
    id: str
    username: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenConfig:
    """
    Immutable signing settings for TokenCodec.
    Access and refresh tokens are signed with separate secrets, so a leaked
    access key cannot be used to mint refresh tokens.
    """
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    issuer: str = "sociala"

    def __post_init__(self):
        if not self.access_secret:
            raise ConfigurationError("access token secret is not configured")
        if not self.refresh_secret:
            raise ConfigurationError("refresh token secret is not configured")
        if self.access_secret == self.refresh_secret:
            raise ConfigurationError("access and refresh secrets must differ")
        if self.access_ttl <= timedelta(0) or self.refresh_ttl <= timedelta(0):
            raise ConfigurationError("token lifetimes must be positive")

    @classmethod
    def from_mapping(cls, config) -> "TokenConfig":
        """Build from a Flask config (or any mapping with the same keys)."""
        return cls(
            access_secret=config.get("JWT_ACCESS_SECRET"),
            refresh_secret=config.get("JWT_REFRESH_SECRET"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "sociala"),
        )


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Signs and verifies access and refresh tokens. Holds no state besides its config."""

    def __init__(self, config: TokenConfig, clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self._clock = clock or _now

    def _secret(self, token_type: str) -> str:
        if token_type == ACCESS:
            return self.config.access_secret
        return self.config.refresh_secret

    def _issue(self, identity: Identity, token_type: str) -> str:
        ttl = self.config.access_ttl if token_type == ACCESS else self.config.refresh_ttl
        now = self._clock()
        payload = {
            "iss": self.config.issuer,
            "sub": str(identity.id),
            "username": identity.username,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "type": token_type,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secret(token_type), algorithm=self.config.algorithm)

    def _verify(self, token: str, token_type: str) -> Identity:
        try:
            decoded: Dict[str, Any] = jwt.decode(
                token,
                self._secret(token_type),
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"require": ["exp", "iat", "sub", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken(f"{token_type} token expired")
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(f"invalid {token_type} token: {exc}")

        if decoded.get("type") != token_type:
            raise InvalidToken("wrong token type")
        username = decoded.get("username")
        if not isinstance(username, str):
            raise InvalidToken("token has no username claim")
        return Identity(id=decoded["sub"], username=username)

    def issue_access(self, identity: Identity) -> str:
        return self._issue(identity, ACCESS)

    def issue_refresh(self, identity: Identity) -> str:
        return self._issue(identity, REFRESH)

    def verify_access(self, token: str) -> Identity:
        """Raises InvalidToken on bad signature, malformed token, wrong type or expiry."""
        return self._verify(token, ACCESS)

    def verify_refresh(self, token: str) -> Identity:
        return self._verify(token, REFRESH)


class CredentialHasher:
    """One-way hash/compare for login passwords and refresh tokens (Argon2id)."""

    def __init__(self, time_cost: Optional[int] = None, memory_cost: Optional[int] = None,
                 parallelism: Optional[int] = None):
        params = {
            "time_cost": time_cost,
            "memory_cost": memory_cost,
            "parallelism": parallelism,
        }
        self._ph = PasswordHasher(**{k: v for k, v in params.items() if v is not None})

    def hash(self, secret: str) -> str:
        return self._ph.hash(secret)

    def verify(self, secret: str, hashed: Optional[str]) -> bool:
        """Return True when `secret` matches `hashed`; malformed hashes never match."""
        if not hashed:
            return False
        try:
            return self._ph.verify(hashed, secret)
        except (VerificationError, InvalidHashError):
            return False
