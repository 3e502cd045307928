"""
core/paths.py -- Canonical storage paths for note files.

Pure functions only: no I/O, no settings lookups. Every mutator and the
listing aggregator derive and parse paths through this module so there is
exactly one definition of the namespace layout:

    notes/class-{10|11|12}/{stream}/{sanitized-subject}/{sanitized-filename}

derive_path() is idempotent: feeding it its own sanitized components yields
the same path again.
"""

from __future__ import annotations

import re

from core.errors import ValidationError

NOTES_ROOT = "notes"
VALID_CLASSES = ("10", "11", "12")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_UNDERSCORE_RUN = re.compile(r"_{2,}")


def sanitize_token(value: str) -> str:
    """Return value with unsafe characters replaced by '_', runs collapsed, lowercased.

    Total over all strings and idempotent. Output only contains [a-z0-9._-]
    and never a double underscore.
    """
    replaced = _UNSAFE_CHARS.sub("_", value)
    return _UNDERSCORE_RUN.sub("_", replaced).lower()


def derive_path(class_no: str | int, stream: str, subject: str, filename: str, root: str = NOTES_ROOT) -> str:
    """Build the storage path for a note file.

    Raises ValidationError if class_no is not one of 10, 11, 12.
    """
    class_key = str(class_no).strip()
    if class_key not in VALID_CLASSES:
        raise ValidationError("Class must be 10, 11, or 12", violations=["Class must be 10, 11, or 12"])
    return f"{root}/class-{class_key}/{stream.lower()}/{sanitize_token(subject)}/{sanitize_token(filename)}"


def parse_note_path(path: str) -> tuple[str, str, str]:
    """Return (class_no, stream, subject) read positionally from a storage path.

    Segments that are missing come back as empty strings rather than raising,
    so a file stored at an unexpected depth still appears in a flat listing.
    """
    parts = path.split("/")
    class_dir = parts[1] if len(parts) > 1 else ""
    stream = parts[2] if len(parts) > 2 else ""
    subject = parts[3] if len(parts) > 3 else ""
    return class_dir.replace("class-", "", 1), stream, subject


def is_pdf_name(name: str) -> bool:
    return name.lower().endswith(".pdf")


def format_file_size(size: int) -> str:
    """Human-readable size: 0 Bytes, 512 Bytes, 1.5 KB, 2.25 MB."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[index]}"
