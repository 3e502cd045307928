"""
core/validation.py -- Input validation shared by every mutator.

Each validator returns the list of violated rules instead of raising on the
first one, so a caller fixing a form sees everything that is wrong at once.
check() turns a non-empty list into a single ValidationError.

Validation always runs before any external call.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from core.errors import ValidationError
from core.paths import NOTES_ROOT, VALID_CLASSES, is_pdf_name

# Identity-provider handle: alphanumerics and single hyphens, no leading or
# trailing hyphen, at most 39 characters.
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9]|-(?=[a-zA-Z0-9])){0,38}$")


def check(violations: list[str], message: str = "Validation failed.") -> None:
    if violations:
        raise ValidationError(message, violations=violations)


def _blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_credential(credential: Optional[str]) -> list[str]:
    if _blank(credential):
        return ["Store credential is required"]
    return []


def validate_username(username: Optional[str], field: str = "Username") -> list[str]:
    if _blank(username):
        return [f"{field} is required"]
    if not USERNAME_PATTERN.match(username.strip()):
        return [f"{field} is not a valid account name"]
    return []


def validate_roster_name(username: Optional[str], field: str = "Username") -> list[str]:
    """Presence only. Names already on the roster are matched as stored, even
    when they predate the handle format."""
    if _blank(username):
        return [f"{field} is required"]
    return []


def validate_upload(
    class_no: Optional[str],
    stream: Optional[str],
    subject: Optional[str],
    filename: Optional[str],
    material_size: int,
    allowed_streams: Sequence[str],
    max_bytes: int,
    max_subject_length: int = 50,
    commit_message: Optional[str] = None,
    max_commit_message_length: int = 200,
) -> list[str]:
    """Return every violated upload rule, in field order."""
    errors: list[str] = []

    if class_no is None or str(class_no).strip() not in VALID_CLASSES:
        errors.append("Class must be 10, 11, or 12")

    streams = [s.lower() for s in allowed_streams]
    if _blank(stream) or stream.strip().lower() not in streams:
        errors.append(f"Stream must be one of: {', '.join(streams)}")

    if _blank(subject):
        errors.append("Subject is required")
    elif len(subject.strip()) > max_subject_length:
        errors.append(f"Subject must be at most {max_subject_length} characters")

    if _blank(filename) or not is_pdf_name(filename.strip()):
        errors.append("File must be a PDF")

    if material_size <= 0:
        errors.append("File content is required")
    elif material_size > max_bytes:
        errors.append(f"File size must be at most {max_bytes // (1024 * 1024)} MB")

    if commit_message and len(commit_message) > max_commit_message_length:
        errors.append(f"Commit message must be at most {max_commit_message_length} characters")

    return errors


def validate_note_path(path: Optional[str], root: str = NOTES_ROOT) -> list[str]:
    """A delete target must be a PDF inside the notes namespace."""
    if _blank(path):
        return ["File path is required"]
    parts = path.split("/")
    errors: list[str] = []
    if parts[0] != root or len(parts) < 2:
        errors.append(f"File path must be inside {root}/")
    if any(part in ("", ".", "..") for part in parts):
        errors.append("File path must not contain empty or relative segments")
    if not is_pdf_name(path):
        errors.append("File must be a PDF")
    return errors


def validate_version(version: Optional[str]) -> list[str]:
    if _blank(version):
        return ["Version token is required"]
    return []
