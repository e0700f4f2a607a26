from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional


class AuthProvider(ABC):
    """Answers "who is asking" for the persistence layer. None means nobody is signed in."""

    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        ...


class StaticAuthProvider(AuthProvider):
    """Always the same user; handy for single-user deployments and tests."""

    def __init__(self, user_id: str):
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValueError("user_id must be a non-empty string")
        self.user_id = user_id.strip()

    def current_user_id(self) -> Optional[str]:
        return self.user_id


class AnonymousAuthProvider(AuthProvider):
    def current_user_id(self) -> Optional[str]:
        return None


class CallableAuthProvider(AuthProvider):
    """Delegate to a callable, e.g. one that reads the user from a request context."""

    def __init__(self, resolver: Callable[[], Optional[str]]):
        self._resolver = resolver

    def current_user_id(self) -> Optional[str]:
        user_id = self._resolver()
        if user_id is None:
            return None
        user_id = str(user_id).strip()
        return user_id or None
