"""Identity provider package."""

from lendledger.services.identity.interface import IdentityProvider
from lendledger.services.identity.memory import InMemoryIdentityProvider

__all__ = ["IdentityProvider", "InMemoryIdentityProvider"]
