"""
api/routes/v1/admins.py -- Admin roster management.

Routes:
  GET    /admins              -- current roster (admin)
  POST   /admins              -- add an admin (super admin)
  DELETE /admins/{username}   -- remove an admin (super admin)

Every write is a compare-and-swap on the roster document. A concurrent
change answers 409 and the client must re-fetch before trying again; the
server never retries on its own.

Super admins cannot be removed through this API (403) -- that status is
only changed by editing the roster document directly.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import AdminAddRequest, AdminChangeResponse, AdminRegistryResponse, CommitResponse
from auth.dependencies import get_store_credential, require_admin, require_super_admin
from auth.models import Session
from content.admins import RegistryChange, add_admin, read_registry, remove_admin
from core.config import get_settings

router = APIRouter()


def _change_response(change: RegistryChange) -> AdminChangeResponse:
    return AdminChangeResponse(
        message=change.message,
        registry=AdminRegistryResponse.from_registry(change.registry),
        commit=CommitResponse.from_commit(change.commit),
    )


@router.get("/admins", response_model=AdminRegistryResponse)
def get_admins(
    request: Request,
    session: Session = Depends(require_admin),
    credential: Optional[str] = Depends(get_store_credential),
) -> AdminRegistryResponse:
    registry = read_registry(
        request.app.state.store,
        session,
        credential,
        get_settings().registry_path,
    )
    return AdminRegistryResponse.from_registry(registry)


@router.post("/admins", response_model=AdminChangeResponse)
def post_admin(
    request: Request,
    body: AdminAddRequest,
    session: Session = Depends(require_super_admin),
    credential: Optional[str] = Depends(get_store_credential),
) -> AdminChangeResponse:
    """Add a username to the admins list. The account must exist at the identity provider."""
    change = add_admin(
        request.app.state.store,
        request.app.state.identity,
        session,
        body.username or "",
        credential,
        get_settings().registry_path,
    )
    return _change_response(change)


@router.delete("/admins/{username}", response_model=AdminChangeResponse)
def delete_admin(
    request: Request,
    username: str,
    session: Session = Depends(require_super_admin),
    credential: Optional[str] = Depends(get_store_credential),
) -> AdminChangeResponse:
    change = remove_admin(
        request.app.state.store,
        session,
        username,
        credential,
        get_settings().registry_path,
    )
    return _change_response(change)
