"""
auth/login.py -- Identity verification pipeline.

login() turns a claimed username plus a bearer credential into a signed,
time-boxed session:

  1. Both inputs present and well-formed           else ValidationError (400)
  2. Identity provider accepts the credential      else InvalidCredential (401)
  3. Claimed name equals the owner, ignoring case  else UsernameMismatch (401)
  4. Admin roster readable with that credential    else RegistryUnavailable (403)
  5. Owner is a super admin or an admin            else NotAuthorized (403)
  6. Mint and sign a two-hour Session.

The credential is used for steps 2 and 4 and then dropped. It is not part of
the Session and is not retained anywhere.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.identity import IdentityClient
from auth.models import LoginResult
from auth.registry import load_registry
from auth.tokens import encode_session, issue_session
from core.errors import NotAuthorized, RegistryUnavailable, ServiceError, UsernameMismatch
from core.validation import check, validate_credential, validate_username

if TYPE_CHECKING:
    from content.store import ContentStore

logger = logging.getLogger("notesvault.auth.login")


def login(
    identity: IdentityClient,
    store: "ContentStore",
    claimed_username: str,
    credential: str,
    registry_path: str,
) -> LoginResult:
    check(validate_username(claimed_username) + validate_credential(credential))

    profile = identity.whoami(credential)
    canonical = profile.username

    if claimed_username.strip().casefold() != canonical.casefold():
        logger.info("Login rejected: claimed username does not own the credential")
        raise UsernameMismatch(
            "Username verification failed.",
            detail="The provided username does not match the credential owner.",
        )

    try:
        registry = load_registry(store, credential, registry_path)
    except ServiceError as e:
        logger.warning("Login for %s could not read the admin roster: %s", canonical, e.code)
        raise RegistryUnavailable("Unable to verify admin status. Check repository access.") from e

    role = registry.role_of(canonical)
    if role is None:
        logger.info("Login rejected: %s is not on the admin roster", canonical)
        raise NotAuthorized("You are not authorized as an admin.")

    session = issue_session(canonical, role)
    logger.info("Login: %s as %s", canonical, role.value)
    return LoginResult(session=session, token=encode_session(session), profile=profile)
