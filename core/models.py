from dataclasses import dataclass, field
from typing import Optional

# ---------------------------------------------------------------------------
# Remote object store shapes
# ---------------------------------------------------------------------------


@dataclass
class StoredObject:
    """One entry in the remote store: a file or a directory.

    version is the store's content hash for this exact object state. It is
    the comparator for every compare-and-swap write.
    """

    path: str
    name: str
    type: str = "file"  # file | dir
    version: Optional[str] = None
    size: int = 0
    download_url: Optional[str] = None
    html_url: Optional[str] = None
    content: Optional[bytes] = None  # only populated by a single-file read


@dataclass
class CommitInfo:
    sha: str
    url: Optional[str] = None


@dataclass
class WriteResult:
    object: StoredObject
    commit: CommitInfo


# ---------------------------------------------------------------------------
# Notes listing
# ---------------------------------------------------------------------------


@dataclass
class NoteEntry:
    name: str
    path: str
    class_no: str
    stream: str
    subject: str
    size: int
    version: Optional[str]
    download_url: Optional[str]
    html_url: Optional[str]


@dataclass
class NotesListing:
    # class -> stream -> subject -> [entry]
    structure: dict[str, dict[str, dict[str, list[NoteEntry]]]] = field(default_factory=dict)
    flat: list[NoteEntry] = field(default_factory=list)
    total: int = 0
    last_updated: str = ""


@dataclass
class UploadResult:
    path: str
    version: Optional[str]
    download_url: Optional[str]
    html_url: Optional[str]
    created: bool
    commit: CommitInfo
