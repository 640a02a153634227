"""Record stores — the narrow read/write contracts the core depends on."""

from brickbase.stores.agreements import AgreementStore
from brickbase.stores.users import UserStore

__all__ = ["AgreementStore", "UserStore"]
