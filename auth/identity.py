"""
auth/identity.py -- Client for the external identity endpoint.

Two questions are asked of the identity provider:
  whoami(credential)          -- who owns this bearer credential?
  exists(username, credential) -- is this a real account?

A rejected credential is InvalidCredential (401). A transport failure or an
unexpected status is Unavailable -- the caller could not be judged either way.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from auth.models import IdentityProfile
from core.errors import InvalidCredential, Unavailable

logger = logging.getLogger("notesvault.auth.identity")


class IdentityClient:
    def __init__(self, api_url: str, timeout: float = 10.0, user_agent: str = "NotesVault-Admin") -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._user_agent = user_agent
        self._session = requests.Session()
        self._session.max_redirects = 3

    def _headers(self, credential: str) -> dict[str, str]:
        return {
            "Authorization": f"token {credential}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self._user_agent,
        }

    def whoami(self, credential: str) -> IdentityProfile:
        """Return the canonical profile of the credential's owner."""
        try:
            resp = self._session.get(f"{self.api_url}/user", headers=self._headers(credential), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Identity lookup failed: %s", e)
            raise Unavailable("The identity provider could not be reached.") from e
        if resp.status_code in (401, 403):
            raise InvalidCredential("Invalid credential.")
        if not resp.ok:
            logger.warning("Identity lookup returned HTTP %d", resp.status_code)
            raise Unavailable(f"The identity provider returned an unexpected status ({resp.status_code}).")
        try:
            data = resp.json()
        except ValueError as e:
            raise Unavailable("The identity provider returned an unreadable response.") from e
        login = data.get("login")
        if not login:
            raise InvalidCredential("Invalid credential.")
        return IdentityProfile(username=login, avatar_url=data.get("avatar_url"))

    def exists(self, username: str, credential: str) -> bool:
        try:
            resp = self._session.get(
                f"{self.api_url}/users/{quote(username, safe='')}",
                headers=self._headers(credential),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Account lookup failed for %s: %s", username, e)
            raise Unavailable("The identity provider could not be reached.") from e
        if resp.status_code == 404:
            return False
        if resp.status_code == 401:
            raise InvalidCredential("Invalid credential.")
        if not resp.ok:
            logger.warning("Account lookup for %s returned HTTP %d", username, resp.status_code)
            raise Unavailable(f"The identity provider returned an unexpected status ({resp.status_code}).")
        return True

    def close(self) -> None:
        self._session.close()
