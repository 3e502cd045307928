"""
auth/guard.py -- Session guard: authenticate a token, then check its role.

Every privileged operation calls authenticate() first and require_role()
where the operation needs more than a plain admin. Both are pure functions
over the signed token; neither touches the network or any shared state.
"""

from __future__ import annotations

from typing import Optional

from auth.models import Role, Session
from auth.tokens import decode_session
from core.errors import Forbidden


def authenticate(token: Optional[str]) -> Session:
    """Return the Session for a signed token or raise Unauthenticated."""
    return decode_session(token or "")


def require_role(session: Session, minimum: Role) -> Session:
    """Raise Forbidden unless the session's role is at least minimum.

    admin satisfies admin; only super_admin satisfies super_admin.
    """
    if session.role.rank < minimum.rank:
        label = "Super admin" if minimum is Role.super_admin else "Admin"
        raise Forbidden(f"{label} privileges required.")
    return session
