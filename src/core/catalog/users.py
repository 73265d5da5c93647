"""
Identity resolution.

The hosting platform authenticates callers; we only turn its principal
into a user record, creating the record the first time we see it.
"""

import logging
from typing import Mapping, Optional, Protocol

from .errors import IdentityError
from .models import Principal, User

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """
    Anything that can tell us who made a request.

    Given the incoming request headers, returns the platform principal
    or None when the caller is anonymous.
    """

    async def fetch_principal(self, headers: Mapping[str, str]) -> Optional[Principal]: ...


class UserStore(Protocol):
    """Where user records live."""

    def get_by_id(self, user_id: str) -> Optional[User]: ...

    def create_if_absent(self, user: User) -> bool: ...


class UserService:
    """Resolves the current caller to a user record."""

    def __init__(self, users: UserStore, identity: IdentityProvider) -> None:
        self._users = users
        self._identity = identity

    async def resolve_current_user(self, headers: Mapping[str, str]) -> User:
        """
        Return the caller's user record, creating it on first sight.

        Creation is insert-if-absent: when two first requests race, the
        loser sees a conflict and re-reads the winner's record.
        """
        principal = await self._identity.fetch_principal(headers)
        if principal is None:
            raise IdentityError("No authenticated principal")

        user = self._users.get_by_id(principal.user_id)
        if user is not None:
            return user

        candidate = principal.to_user()
        if self._users.create_if_absent(candidate):
            logger.info("Created user", extra={"user_id": candidate.id})
            return candidate

        # lost the race; someone else created it
        user = self._users.get_by_id(principal.user_id)
        if user is None:
            raise IdentityError(f"User {principal.user_id} vanished after conflict")
        return user
