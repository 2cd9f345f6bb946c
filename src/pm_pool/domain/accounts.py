"""Account provider Protocol: dependency inversion for the pool engine.

Account identifiers are opaque strings owned by an external collaborator.
Unit tests inject any object conforming to this Protocol.
"""

from dataclasses import dataclass, field
from typing import Protocol

from config.settings import settings


class PoolAccountProvider(Protocol):
    def pool_account(self) -> str: ...

    def pool_manager_account(self) -> str: ...


@dataclass(frozen=True)
class StaticPoolAccountProvider:
    """Fixed identifiers, defaulting to the configured addresses."""

    pool: str = field(default_factory=lambda: settings.POOL_ACCOUNT)
    manager: str = field(default_factory=lambda: settings.POOL_MANAGER_ACCOUNT)

    def pool_account(self) -> str:
        return self.pool

    def pool_manager_account(self) -> str:
        return self.manager
