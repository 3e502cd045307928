"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The signed session is looked for in priority order:
  1. Session cookie -- set by the login route (httpOnly, samesite=strict).
  2. Authorization: Bearer <token> header -- non-browser clients replaying
     the same signed token.

get_current_session() raises Unauthenticated (401) when neither is valid.
require_admin() / require_super_admin() wrap it and raise Forbidden (403)
when the role is too low. The guard runs before any route body, so an
under-privileged caller never reaches the store.

The store credential is separate from the session: callers send it in the
X-Store-Credential header on every call that touches the store.

Layer rule: no imports from api/ or content/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from auth.guard import authenticate, require_role
from auth.models import Role, Session
from core.config import get_settings

CREDENTIAL_HEADER = "X-Store-Credential"


def _session_token(request: Request) -> Optional[str]:
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    return token


def get_current_session(request: Request) -> Session:
    """Require a valid session. Raises Unauthenticated if there is none.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(session: Session = Depends(get_current_session)): ...
    """
    return authenticate(_session_token(request))


def require_admin(request: Request) -> Session:
    return require_role(get_current_session(request), Role.admin)


def require_super_admin(request: Request) -> Session:
    return require_role(get_current_session(request), Role.super_admin)


def get_store_credential(request: Request) -> Optional[str]:
    """The caller's store credential, or None. Operations validate presence."""
    value = request.headers.get(CREDENTIAL_HEADER, "").strip()
    return value or None
