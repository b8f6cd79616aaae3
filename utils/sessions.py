"""
Session core: issues access/refresh pairs, verifies access tokens and
rotates refresh tokens against the single stored credential per user.

Refresh tokens are accepted only while their hash is the credential of
record. Every issuance overwrites it, so at most one refresh token per user
is live. Rotation writes with compare_and_set against the hash it just
checked: when two requests race on the same token only one rotation lands
and the other is rejected as Revoked.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from models.credential_store import CredentialStore
from utils.exceptions import (
    CredentialStoreError,
    InvalidCredentials,
    InvalidToken,
    Revoked,
    Unauthenticated,
)
from utils.security import CredentialHasher, Identity, TokenCodec, TokenPair

logger = logging.getLogger(__name__)


def identity_of(user) -> Identity:
    return Identity(id=str(user.id), username=user.username)


class SessionManager:
    def __init__(self, codec: TokenCodec, store: CredentialStore, hasher: CredentialHasher, accounts=None):
        self.codec = codec
        self.store = store
        self.hasher = hasher
        self.accounts = accounts

    def _sign_pair(self, identity: Identity) -> TokenPair:
        return TokenPair(
            access_token=self.codec.issue_access(identity),
            refresh_token=self.codec.issue_refresh(identity),
        )

    def issue(self, identity: Identity) -> TokenPair:
        """Start a refresh session: sign a pair and make its refresh token the only live one."""
        pair = self._sign_pair(identity)
        self.store.set(identity.id, self.hasher.hash(pair.refresh_token))
        return pair

    def register(self, email: str, username: str, password: str) -> Tuple[object, TokenPair]:
        user = self.accounts.create(email, username, password)
        return user, self.issue(identity_of(user))

    def login(self, email: str, password: str) -> Tuple[object, TokenPair]:
        user = self.accounts.authenticate(email, password)
        if user is None:
            raise InvalidCredentials(f"login failed for {email!r}")
        logger.info("user %s logged in", user.id)
        return user, self.issue(identity_of(user))

    def verify_access(self, token: Optional[str]) -> Identity:
        """Stateless; never consults the credential store."""
        if not token:
            raise Unauthenticated("missing access token")
        return self.codec.verify_access(token)

    def refresh(self, token: Optional[str]) -> TokenPair:
        if not token:
            raise Unauthenticated("missing refresh token")
        identity = self.codec.verify_refresh(token)

        stored = self.store.get(identity.id)
        if stored is None:
            logger.warning("refresh for user %s with no session on record", identity.id)
            raise Revoked("no refresh session on record")
        if not self.hasher.verify(token, stored):
            logger.warning("refresh for user %s presented a superseded token", identity.id)
            raise Revoked("refresh token is not the credential of record")

        pair = self._sign_pair(identity)
        if not self.store.compare_and_set(identity.id, stored, self.hasher.hash(pair.refresh_token)):
            logger.warning("refresh for user %s lost a concurrent rotation", identity.id)
            raise Revoked("credential changed during rotation")
        logger.info("rotated refresh token for user %s", identity.id)
        return pair

    def logout(self, token: Optional[str]) -> None:
        """
        Best effort, never raises. A token that fails verification is ignored
        on purpose: the caller clears its cookie either way.
        """
        if not token:
            return
        try:
            identity = self.codec.verify_refresh(token)
        except InvalidToken as exc:
            logger.debug("logout with unusable refresh token ignored: %s", exc.reason)
            return
        try:
            self.store.set(identity.id, None)
        except CredentialStoreError:
            logger.exception("could not clear refresh credential for user %s", identity.id)
            return
        logger.info("user %s logged out", identity.id)
