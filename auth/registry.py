"""
auth/registry.py -- The admin roster document and how to read it.

The roster is a JSON object stored in the remote store:

    {"super_admins": ["alice"], "admins": ["bob", "carol"]}

Membership is case-insensitive everywhere; the stored spelling is kept as-is.
A name listed in both arrays is treated as a super admin only, so the two
sets stay disjoint in memory and in every document written back.

Layer rule: no imports from api/ or content/. The store is duck-typed here
(anything with get(path, credential) -> StoredObject).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from auth.models import Role
from core.errors import Unavailable

if TYPE_CHECKING:
    from content.store import ContentStore

logger = logging.getLogger("notesvault.auth.registry")


def _fold(name: str) -> str:
    return name.strip().casefold()


@dataclass
class AdminRegistry:
    super_admins: list[str] = field(default_factory=list)
    admins: list[str] = field(default_factory=list)
    version: Optional[str] = None  # store version token of the document this was read from

    @classmethod
    def from_document(cls, doc: dict, version: Optional[str] = None) -> "AdminRegistry":
        supers = _dedupe(doc.get("super_admins") or [])
        super_keys = {_fold(n) for n in supers}
        admins = [n for n in _dedupe(doc.get("admins") or []) if _fold(n) not in super_keys]
        return cls(super_admins=supers, admins=admins, version=version)

    def to_document(self) -> dict:
        return {"super_admins": list(self.super_admins), "admins": list(self.admins)}

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_document(), indent=2).encode("utf-8")

    def is_super_admin(self, username: str) -> bool:
        return _fold(username) in {_fold(n) for n in self.super_admins}

    def is_admin(self, username: str) -> bool:
        return _fold(username) in {_fold(n) for n in self.admins}

    def contains(self, username: str) -> bool:
        return self.is_super_admin(username) or self.is_admin(username)

    def role_of(self, username: str) -> Optional[Role]:
        if self.is_super_admin(username):
            return Role.super_admin
        if self.is_admin(username):
            return Role.admin
        return None

    def with_admin(self, username: str) -> "AdminRegistry":
        return AdminRegistry(
            super_admins=list(self.super_admins),
            admins=[*self.admins, username.strip()],
            version=self.version,
        )

    def without_admin(self, username: str) -> "AdminRegistry":
        key = _fold(username)
        return AdminRegistry(
            super_admins=list(self.super_admins),
            admins=[n for n in self.admins if _fold(n) != key],
            version=self.version,
        )


def _dedupe(names: list) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for n in names:
        if not isinstance(n, str) or not n.strip():
            continue
        key = _fold(n)
        if key not in seen:
            seen.add(key)
            result.append(n.strip())
    return result


def load_registry(store: "ContentStore", credential: str, path: str) -> AdminRegistry:
    """Read and parse the roster. Store errors propagate unchanged.

    A document that is not a JSON object is reported as Unavailable: the
    roster exists but cannot be trusted.
    """
    obj = store.get(path, credential)
    try:
        doc = json.loads((obj.content or b"{}").decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.error("Admin roster at %s is not valid JSON", path)
        raise Unavailable("The admin roster is unreadable.") from e
    if not isinstance(doc, dict):
        logger.error("Admin roster at %s is not a JSON object", path)
        raise Unavailable("The admin roster is unreadable.")
    return AdminRegistry.from_document(doc, version=obj.version)
