"""
content/admins.py -- Compare-and-swap mutations of the admin roster.

Both mutators read the roster together with its version token, change it in
memory, and write it back supplying that token. If anyone else wrote the
roster in between, the store answers 409 and the caller gets Conflict.
Nothing here retries: a blind retry of a roster change could silently repeat
an intent the caller never confirmed.

Both require a super admin session. The role check runs before any input
validation so an under-privileged caller learns nothing about the roster.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.guard import require_role
from auth.identity import IdentityClient
from auth.models import Role, Session
from auth.registry import AdminRegistry, load_registry
from content.store import ContentStore
from core.errors import Forbidden, ValidationError
from core.models import CommitInfo
from core.validation import check, validate_credential, validate_roster_name, validate_username

logger = logging.getLogger("notesvault.content.admins")


@dataclass
class RegistryChange:
    registry: AdminRegistry
    commit: CommitInfo
    message: str


def add_admin(
    store: ContentStore,
    identity: IdentityClient,
    session: Session,
    target: str,
    credential: str,
    registry_path: str,
) -> RegistryChange:
    require_role(session, Role.super_admin)
    check(validate_username(target) + validate_credential(credential))
    target = target.strip()

    if not identity.exists(target, credential):
        raise ValidationError("User not found.", violations=[f"Account {target} not found"])

    registry = load_registry(store, credential, registry_path)
    if registry.contains(target):
        raise ValidationError("User is already an admin.", violations=[f"{target} is already an admin"])

    updated = registry.with_admin(target)
    result = store.put(
        registry_path,
        updated.to_bytes(),
        f"Update admins.json: add {target} (by {session.username})",
        credential,
        expected_version=registry.version,
    )
    updated.version = result.object.version
    logger.info("Admin added: %s (by %s)", target, session.username)
    return RegistryChange(registry=updated, commit=result.commit, message=f"Admin {target} added successfully")


def remove_admin(
    store: ContentStore,
    session: Session,
    target: str,
    credential: str,
    registry_path: str,
) -> RegistryChange:
    require_role(session, Role.super_admin)
    check(validate_roster_name(target) + validate_credential(credential))
    target = target.strip()

    registry = load_registry(store, credential, registry_path)
    if registry.is_super_admin(target):
        raise Forbidden("Cannot remove a super admin.")
    if not registry.is_admin(target):
        raise ValidationError("User is not an admin.", violations=[f"{target} is not an admin"])

    updated = registry.without_admin(target)
    result = store.put(
        registry_path,
        updated.to_bytes(),
        f"Update admins.json: remove {target} (by {session.username})",
        credential,
        expected_version=registry.version,
    )
    updated.version = result.object.version
    logger.info("Admin removed: %s (by %s)", target, session.username)
    return RegistryChange(registry=updated, commit=result.commit, message=f"Admin {target} removed successfully")


def read_registry(store: ContentStore, session: Session, credential: str, registry_path: str) -> AdminRegistry:
    """Current roster for admin screens. Any admin may read it."""
    require_role(session, Role.admin)
    check(validate_credential(credential))
    return load_registry(store, credential, registry_path)
