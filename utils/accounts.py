"""
Account records: creation, password check, lookup.
SessionManager treats this as an external collaborator and only calls
create(), authenticate() and get().
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models.user import User
from utils.exceptions import Conflict
from utils.security import CredentialHasher

logger = logging.getLogger(__name__)

# Hash compared against when the email is unknown, so a miss costs the same as a wrong password
_DUMMY_PASSWORD = "not-a-real-password"


class AccountService:
    def __init__(self, storage, hasher: CredentialHasher):
        self.storage = storage
        self.hasher = hasher
        self._dummy_hash = None

    def create(self, email: str, username: str, password: str) -> User:
        session = self.storage.get_session()
        exists = session.query(User.id).filter(or_(User.email == email, User.username == username)).first()
        if exists:
            raise Conflict(f"email {email!r} or username {username!r} taken")

        user = User(email=email, username=username, password_hash=self.hasher.hash(password))
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError:
            # lost a race with a concurrent registration
            raise Conflict(f"email {email!r} or username {username!r} taken")
        logger.info("registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        session = self.storage.get_session()
        user = session.query(User).filter(User.email == email).first()
        if user is None:
            if self._dummy_hash is None:
                self._dummy_hash = self.hasher.hash(_DUMMY_PASSWORD)
            self.hasher.verify(password, self._dummy_hash)
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None
        return user

    def get(self, user_id: str) -> Optional[User]:
        return self.storage.get(User, user_id)
