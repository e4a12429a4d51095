"""
Abstract Identity Provider Interface

User registration and authentication live outside the ledger.
The ledger only needs to turn a user id into a profile so it can
snapshot display names onto transactions.
"""

from abc import ABC, abstractmethod

from lendledger.models.ledger import UserProfile


class IdentityProvider(ABC):
    """
    Read-only view of the user directory.

    Both methods raise NotFound for an unknown user id.
    """

    @abstractmethod
    async def get_user(self, user_id: str) -> UserProfile:
        pass

    async def get_user_display_name(self, user_id: str) -> str:
        """Current display name of a user."""
        user = await self.get_user(user_id)
        return user.name
