"""
Refresh credential stores.

Each user id maps to at most one hashed refresh token (or None). Writes are
per-key; compare_and_set is the only conditional operation and is what makes
refresh rotation safe against concurrent presentations of the same token.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from models.user import User
from utils.exceptions import CredentialStoreError


class CredentialStore:
    """Interface used by SessionManager."""

    def get(self, user_id: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, user_id: str, credential_hash: Optional[str]) -> None:
        raise NotImplementedError

    def compare_and_set(self, user_id: str, expected: Optional[str], new: Optional[str]) -> bool:
        """Write `new` only if the stored value is still `expected`. Returns True on write."""
        raise NotImplementedError


class SQLCredentialStore(CredentialStore):
    """Backed by users.refresh_token_hash through DBStorage's scoped session."""

    def __init__(self, storage):
        self.storage = storage

    def get(self, user_id):
        session = self.storage.get_session()
        try:
            row = session.query(User.refresh_token_hash).filter(User.id == user_id).first()
        except SQLAlchemyError as exc:
            session.rollback()
            raise CredentialStoreError(f"read failed for user {user_id}") from exc
        return row[0] if row else None

    def set(self, user_id, credential_hash):
        self._write(
            update(User).where(User.id == user_id).values(refresh_token_hash=credential_hash),
            user_id,
        )

    def compare_and_set(self, user_id, expected, new):
        stmt = update(User).where(User.id == user_id)
        if expected is None:
            stmt = stmt.where(User.refresh_token_hash.is_(None))
        else:
            stmt = stmt.where(User.refresh_token_hash == expected)
        return self._write(stmt.values(refresh_token_hash=new), user_id) == 1

    def _write(self, stmt, user_id) -> int:
        session = self.storage.get_session()
        try:
            result = session.execute(stmt.execution_options(synchronize_session=False))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise CredentialStoreError(f"write failed for user {user_id}") from exc
        return result.rowcount


class MemoryCredentialStore(CredentialStore):
    """Process-local store with the same semantics; one lock covers all keys."""

    def __init__(self):
        self._hashes: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    def get(self, user_id):
        with self._lock:
            return self._hashes.get(user_id)

    def set(self, user_id, credential_hash):
        with self._lock:
            self._hashes[user_id] = credential_hash

    def compare_and_set(self, user_id, expected, new):
        with self._lock:
            if self._hashes.get(user_id) != expected:
                return False
            self._hashes[user_id] = new
            return True
