"""Tests for the token codec, its config and the credential hasher."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from utils.exceptions import ConfigurationError, InvalidToken, Unauthenticated
from utils.security import CredentialHasher, Identity, TokenCodec, TokenConfig

ALICE = Identity(id="0b7c6f9e-alice", username="alice")


def _past_clock(hours=1):
    return lambda: datetime.now(timezone.utc) - timedelta(hours=hours)


class TestTokenConfig:
    def test_rejects_missing_access_secret(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(access_secret="", refresh_secret="r")

    def test_rejects_missing_refresh_secret(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(access_secret="a", refresh_secret=None)

    def test_rejects_shared_secret(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(access_secret="same", refresh_secret="same")

    def test_rejects_non_positive_lifetime(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(access_secret="a", refresh_secret="r", access_ttl=timedelta(0))

    def test_is_immutable(self, token_config):
        with pytest.raises(AttributeError):
            token_config.access_secret = "other"

    def test_from_mapping_uses_defaults(self):
        cfg = TokenConfig.from_mapping({"JWT_ACCESS_SECRET": "a", "JWT_REFRESH_SECRET": "r"})
        assert cfg.access_ttl == timedelta(minutes=15)
        assert cfg.refresh_ttl == timedelta(days=7)
        assert cfg.algorithm == "HS256"


class TestTokenCodec:
    def test_access_round_trip(self, codec):
        assert codec.verify_access(codec.issue_access(ALICE)) == ALICE

    def test_refresh_round_trip(self, codec):
        assert codec.verify_refresh(codec.issue_refresh(ALICE)) == ALICE

    def test_claims(self, codec, token_config):
        token = codec.issue_access(ALICE)
        claims = jwt.decode(token, token_config.access_secret, algorithms=["HS256"], issuer="sociala")
        assert claims["sub"] == ALICE.id
        assert claims["username"] == "alice"
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == 15 * 60
        assert claims["jti"]

    def test_refresh_lifetime(self, codec, token_config):
        claims = jwt.decode(
            codec.issue_refresh(ALICE), token_config.refresh_secret, algorithms=["HS256"], issuer="sociala"
        )
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_tokens_issued_back_to_back_differ(self, codec):
        assert codec.issue_refresh(ALICE) != codec.issue_refresh(ALICE)
        assert codec.issue_access(ALICE) != codec.issue_access(ALICE)

    def test_expired_access_token(self, token_config, codec):
        stale = TokenCodec(token_config, clock=_past_clock()).issue_access(ALICE)
        with pytest.raises(InvalidToken, match="expired"):
            codec.verify_access(stale)

    def test_expired_refresh_token(self, token_config, codec):
        stale = TokenCodec(token_config, clock=_past_clock(hours=24 * 8)).issue_refresh(ALICE)
        with pytest.raises(InvalidToken):
            codec.verify_refresh(stale)

    def test_refresh_token_still_valid_after_access_lifetime(self, token_config, codec):
        older = TokenCodec(token_config, clock=_past_clock()).issue_refresh(ALICE)
        assert codec.verify_refresh(older) == ALICE

    def test_invalid_token_is_unauthenticated(self, codec):
        with pytest.raises(Unauthenticated):
            codec.verify_access("not-a-jwt")

    def test_access_token_is_not_a_refresh_token(self, codec):
        with pytest.raises(InvalidToken):
            codec.verify_refresh(codec.issue_access(ALICE))

    def test_refresh_token_is_not_an_access_token(self, codec):
        with pytest.raises(InvalidToken):
            codec.verify_access(codec.issue_refresh(ALICE))

    def test_access_key_cannot_forge_refresh_token(self, codec, token_config):
        now = int(datetime.now(timezone.utc).timestamp())
        forged = jwt.encode(
            {"iss": "sociala", "sub": ALICE.id, "username": "alice", "iat": now, "exp": now + 60,
             "type": "refresh", "jti": "x"},
            token_config.access_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            codec.verify_refresh(forged)

    def test_tampered_payload(self, codec):
        header, _, signature = codec.issue_access(ALICE).split(".")
        other = codec.issue_access(Identity(id="mallory", username="mallory")).split(".")[1]
        with pytest.raises(InvalidToken):
            codec.verify_access(f"{header}.{other}.{signature}")

    def test_other_issuer_rejected(self, codec, token_config):
        now = int(datetime.now(timezone.utc).timestamp())
        foreign = jwt.encode(
            {"iss": "elsewhere", "sub": ALICE.id, "username": "alice", "iat": now, "exp": now + 60,
             "type": "access", "jti": "x"},
            token_config.access_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            codec.verify_access(foreign)

    def test_missing_username_claim(self, codec, token_config):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"iss": "sociala", "sub": ALICE.id, "iat": now, "exp": now + 60, "type": "access", "jti": "x"},
            token_config.access_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            codec.verify_access(token)


class TestCredentialHasher:
    def test_verify(self, hasher):
        hashed = hasher.hash("s3cret-value")
        assert hashed != "s3cret-value"
        assert hasher.verify("s3cret-value", hashed)
        assert not hasher.verify("other-value", hashed)

    def test_long_inputs_compare_in_full(self, hasher, codec):
        # two refresh tokens for the same user share a long common prefix
        first, second = codec.issue_refresh(ALICE), codec.issue_refresh(ALICE)
        assert not hasher.verify(second, hasher.hash(first))

    def test_malformed_or_missing_hash_never_matches(self, hasher):
        assert not hasher.verify("x", "not-an-argon2-hash")
        assert not hasher.verify("x", None)

    def test_default_parameters(self):
        hasher = CredentialHasher()
        assert hasher.hash("pw").startswith("$argon2id$")
