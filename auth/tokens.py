"""
auth/tokens.py -- Signed session tokens and the session cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the username, role, issue time and expiry -- nothing else. The store
       credential used at login is never embedded.

  Stateless: the token IS the session. There is no server-side session map,
       so any instance holding SECRET_KEY can verify any token, and a token
       cannot be revoked before it expires. The lifetime is a fixed two hours
       with no sliding renewal.

  Verification raises Unauthenticated on any failure (bad signature, expired,
       malformed claims, unknown role). The API layer turns that into 401.

Layer rule: no imports from api/ or content/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from auth.models import Role, Session
from core.config import get_settings
from core.errors import Unauthenticated

logger = logging.getLogger("notesvault.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"


# ---------------------------------------------------------------------------
# Session minting
# ---------------------------------------------------------------------------


def issue_session(username: str, role: Role, now: Optional[datetime] = None) -> Session:
    """Build a Session that expires session_expire_seconds after now."""
    issued = now or datetime.now(timezone.utc)
    return Session(
        username=username,
        role=role,
        issued_at=issued,
        expires_at=issued + timedelta(seconds=_settings.session_expire_seconds),
    )


def encode_session(session: Session) -> str:
    payload = {
        "sub": session.username,
        "role": session.role.value,
        "iat": int(session.issued_at.timestamp()),
        "exp": int(session.expires_at.timestamp()),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


# ---------------------------------------------------------------------------
# Session verification
# ---------------------------------------------------------------------------


def decode_session(token: str, now: Optional[datetime] = None) -> Session:
    """Verify signature and expiry and return the Session.

    jose already rejects an expired "exp"; the explicit comparison below keeps
    the rule independent of library leeway defaults.
    """
    if not token:
        raise Unauthenticated("Authentication required.")
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError as e:
        raise Unauthenticated("Invalid or expired session.") from e

    try:
        session = Session(
            username=str(payload["sub"]),
            role=Role(payload["role"]),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise Unauthenticated("Invalid or expired session.") from e

    current = now or datetime.now(timezone.utc)
    if current >= session.expires_at:
        raise Unauthenticated("Invalid or expired session.")
    return session


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(response, token: str) -> None:
    """Write the signed session as a cookie on the response.

    httponly=True: scripts cannot read the cookie.
    samesite="strict": never sent on cross-site requests.
    secure: only sent over HTTPS (SECURE_COOKIES, on by default).
    max_age: matches the token expiry so both expire together.
    """
    response.set_cookie(
        _settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
        max_age=_settings.session_expire_seconds,
        path="/",
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(
        _settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
    )
