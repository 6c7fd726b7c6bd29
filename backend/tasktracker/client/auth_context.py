"""Auth Context — the client's explicit record of who is signed in.

Invariants:
    - Populated only by login(); cleared only by logout()
    - update_user() refreshes the profile of the current session and never
      switches identity
    - Every other component reads user/token through properties

Design Decisions:
    - Passed into TaskApiClient and TaskView constructors instead of living in
      a module global, so two sessions can coexist in one process (and in tests)
"""

import logging

from tasktracker.schemas.user import UserProfile

logger = logging.getLogger(__name__)


class AuthContext:
    """Current user and bearer credential for one client session."""

    def __init__(self) -> None:
        self._user: UserProfile | None = None
        self._token: str | None = None

    @property
    def user(self) -> UserProfile | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def login(self, user: UserProfile, token: str) -> None:
        if not token:
            raise ValueError("token must be non-empty")
        self._user = user
        self._token = token
        logger.info("Signed in", extra={"owner_id": user.id})

    def update_user(self, user: UserProfile) -> None:
        if self._user is not None and user.id != self._user.id:
            raise ValueError("update_user cannot switch the signed-in identity")
        self._user = user

    def logout(self) -> None:
        if self._user is not None:
            logger.info("Signed out", extra={"owner_id": self._user.id})
        self._user = None
        self._token = None
