from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an employee or administrator.

    Plain data object; no database access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role = Role.EMPLOYEE
    is_active: bool = True


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role
