"""
content/listing.py -- Rebuild the browsable notes tree from the flat store.

The store only answers "what is directly inside this directory", so the
aggregator walks the notes root depth-first and keeps every *.pdf file.

Rules of the walk:
  - 404 on any directory (including the root) means "empty", not an error.
  - Any other store failure (a rejected credential, a 403 rate limit, an
    outage) becomes Unavailable: the public listing never reports a
    credential problem to a reader.
  - Depth and total entries visited are capped; exceeding either raises
    TooLarge instead of fanning out without bound.

Two projections come back from one walk:
  structure -- class -> stream -> subject -> [NoteEntry]
  flat      -- every NoteEntry with class/stream/subject read positionally

The aggregator does no caching. The HTTP layer marks the response as
cacheable for listing_cache_seconds.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from content.store import ContentStore
from core.errors import NotFound, ServiceError, TooLarge, Unavailable
from core.models import NoteEntry, NotesListing, StoredObject
from core.paths import NOTES_ROOT, is_pdf_name, parse_note_path

logger = logging.getLogger("notesvault.content.listing")


class _Walk:
    def __init__(self, store: ContentStore, credential: Optional[str], max_depth: int, max_entries: int) -> None:
        self.store = store
        self.credential = credential
        self.max_depth = max_depth
        self.max_entries = max_entries
        self.visited = 0
        self.files: list[StoredObject] = []

    def run(self, path: str, depth: int = 0) -> None:
        if depth > self.max_depth:
            raise TooLarge(f"Notes tree is deeper than {self.max_depth} levels.")
        try:
            children = self.store.list_dir(path, self.credential)
        except NotFound:
            return
        except ServiceError as e:
            logger.warning("Notes walk failed at %s: %s", path, e.code)
            raise Unavailable("The notes listing is temporarily unavailable.") from e
        for item in children:
            self.visited += 1
            if self.visited > self.max_entries:
                raise TooLarge(f"Notes tree has more than {self.max_entries} entries.")
            if item.type == "file" and is_pdf_name(item.name):
                self.files.append(item)
            elif item.type == "dir":
                self.run(item.path, depth + 1)


def _to_entry(obj: StoredObject) -> NoteEntry:
    class_no, stream, subject = parse_note_path(obj.path)
    return NoteEntry(
        name=obj.name,
        path=obj.path,
        class_no=class_no,
        stream=stream,
        subject=subject,
        size=obj.size,
        version=obj.version,
        download_url=obj.download_url,
        html_url=obj.html_url,
    )


def build_structure(entries: list[NoteEntry], root: str = NOTES_ROOT) -> dict:
    """Nest entries under class -> stream -> subject.

    Only paths with all four segments (root/class-N/stream/subject/...) are
    nested; shallower files still appear in the flat projection.
    """
    structure: dict[str, dict[str, dict[str, list[NoteEntry]]]] = {}
    for entry in entries:
        parts = entry.path.split("/")
        if len(parts) < 5 or parts[0] != root:
            continue
        subjects = structure.setdefault(entry.class_no, {}).setdefault(entry.stream, {})
        subjects.setdefault(entry.subject, []).append(entry)
    return structure


def list_notes(
    store: ContentStore,
    credential: Optional[str] = None,
    root: str = NOTES_ROOT,
    max_depth: int = 8,
    max_entries: int = 5000,
) -> NotesListing:
    walk = _Walk(store, credential or None, max_depth, max_entries)
    walk.run(root)
    flat = [_to_entry(obj) for obj in walk.files]
    logger.debug("Listed %d notes (%d entries visited)", len(flat), walk.visited)
    return NotesListing(
        structure=build_structure(flat, root),
        flat=flat,
        total=len(flat),
        last_updated=datetime.now(timezone.utc).isoformat(),
    )
