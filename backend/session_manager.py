"""
Session management for SmartNotes
Owns the active user, the credential list and the per-user note collection.

Credentials are stored and compared in clear text. Existing stored data
depends on that format, so it is kept as-is.
"""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from backend.errors import (
    CorruptStoreError, DuplicateUsernameError, InvalidCredentialsError,
    MissingCredentialsError,
)
from backend.models import User, new_id
from backend.note_store import NoteStore
from utils.config import ACTIVE_USER_KEY, USERS_KEY

logger = logging.getLogger(__name__)


class CredentialStore:
    """All registered users, kept as one list under a shared key"""

    def __init__(self, blob_store):
        self.blob_store = blob_store

    def list_users(self) -> List[User]:
        raw = self.blob_store.get(USERS_KEY)
        if raw is None:
            return []
        try:
            return [User.model_validate(u) for u in json.loads(raw)]
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError, ValidationError) as e:
            logger.error(f"Credential store is unreadable: {e}")
            raise CorruptStoreError(USERS_KEY, str(e)) from e

    def find(self, username: str) -> Optional[User]:
        for user in self.list_users():
            if user.username == username:
                return user
        return None

    def add(self, user: User):
        users = self.list_users() + [user]
        payload = json.dumps([u.to_json_dict() for u in users])
        self.blob_store.set(USERS_KEY, payload.encode("utf-8"))


class Session:
    """Context for one logged-in user: identity plus their notes"""

    def __init__(self, user: User, note_store: NoteStore):
        self.user = user
        self.notes = note_store

    def init(self):
        self.notes.load(self.user.id)

    def teardown(self):
        self.notes.clear()


class SessionManager:
    """Login, logout and registration; holds at most one active Session"""

    def __init__(self, blob_store):
        self.blob_store = blob_store
        self.credentials = CredentialStore(blob_store)
        self.session: Optional[Session] = None

    @property
    def current_user(self) -> Optional[User]:
        return self.session.user if self.session else None

    @property
    def note_store(self) -> Optional[NoteStore]:
        return self.session.notes if self.session else None

    def login(self, user: User) -> Session:
        """Make user the active user, remember it and load their notes"""
        if self.session is not None:
            self.session.teardown()

        self.blob_store.set(ACTIVE_USER_KEY, json.dumps(user.to_json_dict()).encode("utf-8"))
        self.session = Session(user, NoteStore(self.blob_store))
        self.session.init()
        logger.info(f"User {user.username} logged in")
        return self.session

    def logout(self):
        """Forget the active user; their notes stay in storage"""
        self.blob_store.remove(ACTIVE_USER_KEY)
        if self.session is not None:
            logger.info(f"User {self.session.user.username} logged out")
            self.session.teardown()
        self.session = None

    def resume(self) -> Optional[Session]:
        """Log back in the user remembered from a previous run, if any"""
        raw = self.blob_store.get(ACTIVE_USER_KEY)
        if raw is None:
            return None
        try:
            user = User.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable active session marker: {e}")
            return None
        return self.login(user)

    def authenticate(self, username: str, password: str) -> User:
        _check_fields(username, password)
        for user in self.credentials.list_users():
            if user.username == username and user.password == password:
                return user
        raise InvalidCredentialsError("Invalid username or password")

    def register(self, username: str, password: str) -> User:
        """Create a user and log them in"""
        _check_fields(username, password)
        if self.credentials.find(username) is not None:
            raise DuplicateUsernameError("Username already taken")

        user = User(id=new_id(), username=username, password=password)
        self.credentials.add(user)
        logger.info(f"Registered user {username}")
        self.login(user)
        return user

    def sign_in(self, username: str, password: str) -> User:
        """authenticate() followed by login()"""
        user = self.authenticate(username, password)
        self.login(user)
        return user


def _check_fields(username: str, password: str):
    if not username.strip() or not password.strip():
        raise MissingCredentialsError("Please fill in all fields")
