"""
content/materials.py -- Upload and delete note files (compare-and-swap).

upload():
  1. Validate every field and collect all violations into one ValidationError.
  2. Derive the canonical storage path.
  3. Probe the path. An existing object's version makes the write an update;
     absence makes it a create.
  4. Write with that version. A concurrent change surfaces as Conflict.

delete():
  The caller supplies the version token it saw in a listing. It is not
  re-read here: deleting "whatever is there now" would defeat the check.

Both require an admin session. Neither retries.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.guard import require_role
from auth.models import Role, Session
from content.store import ContentStore
from core.config import get_settings
from core.errors import Conflict
from core.models import CommitInfo, UploadResult
from core.paths import derive_path, format_file_size
from core.validation import check, validate_credential, validate_note_path, validate_upload, validate_version

logger = logging.getLogger("notesvault.content.materials")


def upload(
    store: ContentStore,
    session: Session,
    material: bytes,
    class_no: Optional[str],
    stream: Optional[str],
    subject: Optional[str],
    filename: Optional[str],
    credential: Optional[str],
    commit_message: Optional[str] = None,
) -> UploadResult:
    require_role(session, Role.admin)
    settings = get_settings()

    errors = validate_upload(
        class_no,
        stream,
        subject,
        filename,
        len(material or b""),
        allowed_streams=settings.allowed_streams,
        max_bytes=settings.max_material_bytes,
        max_subject_length=settings.max_subject_length,
        commit_message=commit_message,
        max_commit_message_length=settings.max_commit_message_length,
    )
    check(errors + validate_credential(credential), "Upload validation failed.")

    path = derive_path(class_no, stream.strip(), subject.strip(), filename.strip(), root=settings.notes_root)
    existing = store.probe(path, credential)
    expected = existing.version if existing else None

    message = commit_message or f"Upload {filename.strip()} by {session.username}"
    try:
        result = store.put(path, material, message, credential, expected_version=expected)
    except Conflict as e:
        raise Conflict("File was modified concurrently, retry.") from e

    logger.info(
        "Note %s: %s (%s) by %s",
        "uploaded" if existing is None else "updated",
        path,
        format_file_size(len(material)),
        session.username,
    )
    return UploadResult(
        path=result.object.path or path,
        version=result.object.version,
        download_url=result.object.download_url,
        html_url=result.object.html_url,
        created=existing is None,
        commit=result.commit,
    )


def delete(
    store: ContentStore,
    session: Session,
    path: Optional[str],
    version: Optional[str],
    credential: Optional[str],
) -> CommitInfo:
    require_role(session, Role.admin)
    settings = get_settings()
    check(
        validate_note_path(path, root=settings.notes_root) + validate_version(version) + validate_credential(credential),
        "Delete validation failed.",
    )

    filename = path.rsplit("/", 1)[-1]
    commit = store.delete(path, f"Delete note: {filename} (by {session.username})", version, credential)
    logger.info("Note deleted: %s by %s", path, session.username)
    return commit
