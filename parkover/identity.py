"""Identity provider seam: who is the current user, if anyone."""

from contextvars import ContextVar
from typing import Optional, Protocol


class IdentityProvider(Protocol):
    def current_user_id(self) -> Optional[str]: ...


class StaticIdentity:
    """Fixed identity, for scripts and tests."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id


_request_user_id: ContextVar[Optional[str]] = ContextVar("request_user_id", default=None)


class RequestIdentity:
    """Identity bound to the current async context (one HTTP request)."""

    def current_user_id(self) -> Optional[str]:
        return _request_user_id.get()

    @staticmethod
    def set_user_id(user_id: Optional[str]) -> None:
        _request_user_id.set(user_id or None)
