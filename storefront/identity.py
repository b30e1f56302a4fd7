"""
Identity — the signed-in user and the provider that authenticates them.

Authentication itself lives outside storefront. Services receive the
current User (or None) explicitly and check it with require_user /
require_role.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from kungfu import Result, Ok, Error

from storefront.domain import Role
from storefront.errors import Unauthenticated, Forbidden


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    role: Role = Role.CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.SELLER, Role.ADMIN)


@dataclass(frozen=True, slots=True)
class SignUp:
    email: str
    password: str
    full_name: str | None = None


class IdentityProvider(Protocol):
    """External authentication service."""

    async def sign_in(self, email: str, password: str) -> Result[User, Unauthenticated]:
        ...

    async def sign_up(self, profile: SignUp) -> Result[User, Unauthenticated]:
        ...

    async def current_user(self) -> User | None:
        ...

    async def role(self, user: User) -> Role:
        ...


def require_user(user: User | None) -> Result[User, Unauthenticated]:
    if user is None:
        return Error(Unauthenticated())
    return Ok(user)


def require_role(
    user: User | None,
    roles: tuple[Role, ...],
    action: str,
) -> Result[User, Unauthenticated | Forbidden]:
    """Signed-in user holding one of roles, else the matching error."""
    match require_user(user):
        case Ok(u) if u.role in roles:
            return Ok(u)
        case Ok(_):
            return Error(Forbidden(action))
        case Error(e):
            return Error(e)


__all__ = (
    "User",
    "SignUp",
    "IdentityProvider",
    "require_user",
    "require_role",
)
