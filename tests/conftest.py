"""
tests/conftest.py -- Shared test fixtures for NotesVault.

This module provides:
  - FakeStore: in-memory stand-in for content.store.ContentStore that enforces
    the same compare-and-swap rules (version mismatch -> Conflict, missing
    object -> NotFound)
  - FakeIdentity: in-memory stand-in for auth.identity.IdentityClient
  - store / identity / session fixtures for unit tests
  - api: TestClient over the real app with a patched lifespan that wires the
    fakes into app.state

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import json
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Optional

# CRITICAL: Set env before any auth/core import; get_settings() is cached.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECURE_COOKIES", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')
os.environ.setdefault("STORE_OWNER", "institute")
os.environ.setdefault("STORE_REPO", "materials")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import IdentityProfile, Role, Session
from auth.tokens import encode_session, issue_session
from core.errors import Conflict, InvalidCredential, NotFound
from core.models import CommitInfo, StoredObject, WriteResult

REGISTRY_PATH = "admins/admins.json"
REGISTRY_DOC = {"super_admins": ["alice"], "admins": ["bob"]}

# credential -> canonical username
TOKENS = {
    "tok-alice": "alice",
    "tok-bob": "bob",
    "tok-eve": "eve",
}
ACCOUNTS = {"alice", "bob", "carol", "dave", "eve"}


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeStore:
    """In-memory object store keyed by path, with per-object version tokens."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}
        self.failures: dict[str, Exception] = {}
        self.messages: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self._counter = 0

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    def seed(self, path: str, content: bytes) -> str:
        version = self._next("v")
        self.files[path] = (content, version)
        return version

    def version_of(self, path: str) -> Optional[str]:
        entry = self.files.get(path)
        return entry[1] if entry else None

    def _obj(self, path: str, with_content: bool = False) -> StoredObject:
        content, version = self.files[path]
        return StoredObject(
            path=path,
            name=path.rsplit("/", 1)[-1],
            type="file",
            version=version,
            size=len(content),
            download_url=f"https://raw.example/{path}",
            html_url=f"https://store.example/{path}",
            content=content if with_content else None,
        )

    def _check_failure(self, path: str) -> None:
        if path in self.failures:
            raise self.failures[path]

    def get(self, path: str, credential: Optional[str] = None) -> StoredObject:
        self.calls.append(("get", path))
        self._check_failure(path)
        if path not in self.files:
            raise NotFound(f"No object at {path}.")
        return self._obj(path, with_content=True)

    def probe(self, path: str, credential: Optional[str] = None) -> Optional[StoredObject]:
        self.calls.append(("probe", path))
        self._check_failure(path)
        return self._obj(path) if path in self.files else None

    def list_dir(self, path: str, credential: Optional[str] = None) -> list[StoredObject]:
        self.calls.append(("list", path))
        self._check_failure(path)
        prefix = path.rstrip("/") + "/"
        children: dict[str, StoredObject] = {}
        for file_path in sorted(self.files):
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix) :]
            head = rest.split("/", 1)[0]
            if "/" in rest:
                children.setdefault(head, StoredObject(path=prefix + head, name=head, type="dir"))
            else:
                children[head] = self._obj(file_path)
        if not children:
            raise NotFound(f"No object at {path}.")
        return list(children.values())

    def put(
        self,
        path: str,
        content: bytes,
        message: str,
        credential: str,
        expected_version: Optional[str] = None,
    ) -> WriteResult:
        self.calls.append(("put", path))
        self._check_failure(path)
        current = self.version_of(path)
        if current != expected_version:
            raise Conflict("The object was modified concurrently. Re-fetch and retry.")
        self.files[path] = (content, self._next("v"))
        self.messages.append(message)
        commit = self._next("c")
        return WriteResult(object=self._obj(path), commit=CommitInfo(sha=commit, url=f"https://store.example/commit/{commit}"))

    def delete(self, path: str, message: str, expected_version: str, credential: str) -> CommitInfo:
        self.calls.append(("delete", path))
        self._check_failure(path)
        current = self.version_of(path)
        if current is None:
            raise NotFound(f"No object at {path}.")
        if current != expected_version:
            raise Conflict("The object was modified concurrently. Re-fetch and retry.")
        del self.files[path]
        self.messages.append(message)
        commit = self._next("c")
        return CommitInfo(sha=commit, url=f"https://store.example/commit/{commit}")

    def registry(self) -> dict:
        return json.loads(self.files[REGISTRY_PATH][0])

    def close(self) -> None:
        pass


class FakeIdentity:
    def __init__(self, tokens: dict[str, str], accounts: set[str]) -> None:
        self.tokens = dict(tokens)
        self.accounts = {a.lower() for a in accounts}
        self.lookups: list[str] = []

    def whoami(self, credential: str) -> IdentityProfile:
        if credential not in self.tokens:
            raise InvalidCredential("Invalid credential.")
        name = self.tokens[credential]
        return IdentityProfile(username=name, avatar_url=f"https://avatars.example/{name}")

    def exists(self, username: str, credential: str) -> bool:
        self.lookups.append(username)
        return username.lower() in self.accounts

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> FakeStore:
    s = FakeStore()
    s.seed(REGISTRY_PATH, json.dumps(REGISTRY_DOC).encode())
    return s


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity(TOKENS, ACCOUNTS)


@pytest.fixture
def super_session() -> Session:
    return issue_session("alice", Role.super_admin)


@pytest.fixture
def admin_session() -> Session:
    return issue_session("bob", Role.admin)


@pytest.fixture
def super_headers(super_session: Session) -> dict[str, str]:
    """Bearer session for alice (super admin) plus her store credential."""
    return {"Authorization": f"Bearer {encode_session(super_session)}", "X-Store-Credential": "tok-alice"}


@pytest.fixture
def admin_headers(admin_session: Session) -> dict[str, str]:
    """Bearer session for bob (admin) plus his store credential."""
    return {"Authorization": f"Bearer {encode_session(admin_session)}", "X-Store-Credential": "tok-bob"}


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(store: FakeStore, identity: FakeIdentity):
    """Return a lifespan that wires the fakes into app.state instead of real clients."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        app.state.identity = identity
        yield

    return test_lifespan


@pytest.fixture
def api(store: FakeStore, identity: FakeIdentity) -> Generator[tuple[TestClient, FakeStore, FakeIdentity], None, None]:
    """Yield (client, store, identity) over the real app with fake backends.

    Function-scoped: every test starts from the seeded roster and an empty
    notes namespace, and with a fresh login rate-limit window.
    """
    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(store, identity)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store, identity
