"""
content/store.py -- Client for the remote version-controlled object store.

The store is a GitHub-style contents API: objects are addressed by path inside
one repository, every object carries a content hash (the "version"), and a
write that supplies a stale version is rejected with 409. This module is the
only place that speaks that wire format.

Usage:
    store = ContentStore(api_url, owner, repo)
    obj = store.get("admins/admins.json", credential)        # StoredObject with content
    items = store.list_dir("notes/class-10", credential)     # list[StoredObject]
    result = store.put(path, data, "message", credential, expected_version=obj.version)
    commit = store.delete(path, "message", obj.version, credential)

Error translation (never echoes provider bodies):
    404                  -> NotFound
    409                  -> Conflict
    422 on a create      -> Conflict (object appeared since the caller probed)
    401                  -> InvalidCredential
    403                  -> Forbidden
    other / transport    -> Unavailable

The credential is passed per call and never stored on the client.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import requests

from core.errors import Conflict, Forbidden, InvalidCredential, NotFound, Unavailable
from core.models import CommitInfo, StoredObject, WriteResult

logger = logging.getLogger("notesvault.store")

_ACCEPT = "application/vnd.github.v3+json"


class ContentStore:
    def __init__(
        self,
        api_url: str,
        owner: str,
        repo: str,
        branch: str = "main",
        timeout: float = 10.0,
        user_agent: str = "NotesVault-Admin",
    ) -> None:
        self.base_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}/contents"
        self.branch = branch
        self.timeout = timeout
        self._user_agent = user_agent
        # Shared session for connection pooling. The store is a known API,
        # so a short redirect chain is plenty.
        self._session = requests.Session()
        self._session.max_redirects = 3

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: str, credential: Optional[str] = None) -> StoredObject:
        """Read a single file, including its decoded content."""
        data = self._request("GET", path, credential)
        if isinstance(data, list):
            raise Unavailable(f"Expected a file at {path}, found a directory.")
        obj = _to_object(data)
        raw = data.get("content")
        if raw:
            obj.content = base64.b64decode(raw)
        return obj

    def probe(self, path: str, credential: Optional[str] = None) -> Optional[StoredObject]:
        """Metadata of a file (version, size, URLs) or None if absent.

        The content is not decoded; callers only need the version token.
        """
        try:
            data = self._request("GET", path, credential)
        except NotFound:
            return None
        if isinstance(data, list):
            raise Unavailable(f"Expected a file at {path}, found a directory.")
        return _to_object(data)

    def list_dir(self, path: str, credential: Optional[str] = None) -> list[StoredObject]:
        """List the immediate children of a directory."""
        data = self._request("GET", path, credential)
        if not isinstance(data, list):
            # A file at this path is a one-entry listing of itself.
            return [_to_object(data)]
        return [_to_object(item) for item in data]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(
        self,
        path: str,
        content: bytes,
        message: str,
        credential: str,
        expected_version: Optional[str] = None,
    ) -> WriteResult:
        """Create or update a file.

        expected_version=None means "create"; otherwise the store only accepts
        the write if the object's current version still equals it.
        """
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }
        if expected_version:
            body["sha"] = expected_version
        data = self._request("PUT", path, credential, json=body, creating=expected_version is None)
        return WriteResult(object=_to_object(data.get("content") or {}), commit=_to_commit(data.get("commit")))

    def delete(self, path: str, message: str, expected_version: str, credential: str) -> CommitInfo:
        body = {"message": message, "sha": expected_version, "branch": self.branch}
        data = self._request("DELETE", path, credential, json=body)
        return _to_commit(data.get("commit"))

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, credential: Optional[str]) -> dict[str, str]:
        headers = {"Accept": _ACCEPT, "User-Agent": self._user_agent}
        if credential:
            headers["Authorization"] = f"token {credential}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        credential: Optional[str],
        json: Optional[dict] = None,
        creating: bool = False,
    ) -> Any:
        url = f"{self.base_url}/{path.strip('/')}"
        params = {"ref": self.branch} if method == "GET" else None
        try:
            resp = self._session.request(
                method,
                url,
                headers=self._headers(credential),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Store %s failed for %s: %s", method, path, e)
            raise Unavailable("The content store could not be reached.") from e

        status = resp.status_code
        if status == 404:
            raise NotFound(f"No object at {path}.")
        if status == 409 or (status == 422 and creating):
            raise Conflict("The object was modified concurrently. Re-fetch and retry.")
        if status == 401:
            raise InvalidCredential("The store rejected the credential.")
        if status == 403:
            raise Forbidden("The credential is not permitted to perform this operation.")
        if status >= 400:
            logger.warning("Store %s %s returned HTTP %d", method, path, status)
            raise Unavailable(f"The content store returned an unexpected status ({status}).")
        if status == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Store %s %s returned a non-JSON body", method, path)
            raise Unavailable("The content store returned an unreadable response.") from e


def _to_object(data: dict) -> StoredObject:
    return StoredObject(
        path=data.get("path", ""),
        name=data.get("name", ""),
        type=data.get("type", "file"),
        version=data.get("sha"),
        size=int(data.get("size") or 0),
        download_url=data.get("download_url"),
        html_url=data.get("html_url"),
    )


def _to_commit(data: Optional[dict]) -> CommitInfo:
    data = data or {}
    return CommitInfo(sha=data.get("sha", ""), url=data.get("html_url"))
