"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost zero logic). Stores and
routes do the work.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    admin = "admin"
    super_admin = "super_admin"

    @property
    def rank(self) -> int:
        return 2 if self is Role.super_admin else 1


@dataclass(frozen=True)
class Session:
    """The signed claims carried by the caller.

    This is the only server-relevant state. It never holds the bearer
    credential used at login: the credential is supplied again on every call
    that touches the store and is discarded afterwards.
    """

    username: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.super_admin


@dataclass
class IdentityProfile:
    """What the identity provider says about a credential's owner."""

    username: str  # canonical spelling from the provider
    avatar_url: Optional[str] = None


@dataclass
class LoginResult:
    session: Session
    token: str  # signed session, handed to the caller as a cookie
    profile: IdentityProfile
