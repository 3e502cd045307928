"""
api/routes/v1/auth.py -- Session endpoints.

Routes:
  POST /api/v1/auth/login   -- verify credential + roster; sets the session cookie
  POST /api/v1/auth/logout  -- clears the session cookie; 200
  GET  /api/v1/auth/me      -- current session claims (requires auth)

Security:
  POST /login is rate-limited per client address (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on login and logout responses.
  Logout only clears the caller's cookie. Sessions are stateless and cannot be
  revoked server-side; a copied token stays valid until it expires.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, MeResponse, MessageResponse
from auth.dependencies import get_current_session
from auth.login import login as verify_login
from auth.models import Session
from auth.tokens import clear_session_cookie, set_session_cookie
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/login:   public -- the login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:  public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/me:      requires a session (get_current_session)
router = APIRouter()


@limiter.limit(get_settings().login_rate_limit)
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange a username + store credential for a signed two-hour session.

    Errors (all rendered by the ServiceError handler):
      400 validation_error      -- missing or malformed username / token
      401 invalid_credential    -- the identity provider rejected the token
      401 username_mismatch     -- the token belongs to someone else
      403 registry_unavailable  -- the admin roster could not be read
      403 not_authorized        -- not on the admin roster
    """
    result = verify_login(
        request.app.state.identity,
        request.app.state.store,
        body.username or "",
        body.token or "",
        get_settings().registry_path,
    )
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse.from_login(result.session, result.profile).model_dump(mode="json"),
    )
    set_session_cookie(resp, result.token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout() -> JSONResponse:
    """Clear the session cookie."""
    resp = JSONResponse(content=MessageResponse(message="Logged out successfully").model_dump())
    clear_session_cookie(resp)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(session: Session = Depends(get_current_session)) -> MeResponse:
    """Return the claims of the current session."""
    return MeResponse(
        username=session.username,
        role=session.role.value,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )
