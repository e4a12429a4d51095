"""In-memory identity provider for tests and local runs."""

from typing import Iterable, Optional

from lendledger.errors import NotFound
from lendledger.models.ledger import UserProfile
from lendledger.services.identity.interface import IdentityProvider


class InMemoryIdentityProvider(IdentityProvider):
    """Holds user profiles in a dict keyed by user id."""

    def __init__(self, users: Optional[Iterable[UserProfile]] = None):
        self._users: dict[str, UserProfile] = {}
        for user in users or []:
            self.add_user(user)

    def add_user(self, user: UserProfile) -> UserProfile:
        """Register or replace a profile."""
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> UserProfile:
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFound("User", user_id)
