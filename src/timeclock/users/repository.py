from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for users; services depend on this, not on MySQL."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_admin_view(self) -> Sequence[dict]:
        """Users ordered by name, each with its attendance count."""

        raise NotImplementedError
