"""
API request and response models for NotesVault REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models are deliberately lenient (plain optional strings): the domain
validators collect every violation into one 400 response, which a field-level
422 from Pydantic would cut short.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import IdentityProfile, Session
from auth.registry import AdminRegistry
from core.models import CommitInfo, NoteEntry, NotesListing, UploadResult

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: Optional[str] = Field(default=None, max_length=255)
    token: Optional[str] = Field(default=None, max_length=255)


class AdminAddRequest(BaseModel):
    """Request body for POST /api/v1/admins."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Session responses
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Public profile returned on a successful login. The token itself is only in the cookie."""

    model_config = ConfigDict(frozen=True)

    username: str
    role: str
    avatar_url: Optional[str] = None
    expires_at: datetime
    expires_in: int

    @classmethod
    def from_login(cls, session: Session, profile: IdentityProfile) -> "LoginResponse":
        return cls(
            username=session.username,
            role=session.role.value,
            avatar_url=profile.avatar_url,
            expires_at=session.expires_at,
            expires_in=int((session.expires_at - session.issued_at).total_seconds()),
        )


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    role: str
    issued_at: datetime
    expires_at: datetime


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class CommitResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    url: Optional[str] = None

    @classmethod
    def from_commit(cls, commit: CommitInfo) -> "CommitResponse":
        return cls(sha=commit.sha, url=commit.url)


class NoteFileResponse(BaseModel):
    """One note file. version is the token a later delete must present."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    class_no: str
    stream: str
    subject: str
    size: int
    version: Optional[str] = None
    download_url: Optional[str] = None
    html_url: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: NoteEntry) -> "NoteFileResponse":
        return cls(
            name=entry.name,
            path=entry.path,
            class_no=entry.class_no,
            stream=entry.stream,
            subject=entry.subject,
            size=entry.size,
            version=entry.version,
            download_url=entry.download_url,
            html_url=entry.html_url,
        )


class NotesListResponse(BaseModel):
    """Response for GET /api/v1/notes.

    structure -- class -> stream -> subject -> files
    flat      -- the same files as one list, for client-side filtering
    """

    model_config = ConfigDict(frozen=True)

    structure: dict[str, dict[str, dict[str, list[NoteFileResponse]]]]
    flat: list[NoteFileResponse]
    total: int
    last_updated: str

    @classmethod
    def from_listing(cls, listing: NotesListing) -> "NotesListResponse":
        return cls(
            structure={
                class_no: {
                    stream: {subject: [NoteFileResponse.from_entry(e) for e in files] for subject, files in subjects.items()}
                    for stream, subjects in streams.items()
                }
                for class_no, streams in listing.structure.items()
            },
            flat=[NoteFileResponse.from_entry(e) for e in listing.flat],
            total=listing.total,
            last_updated=listing.last_updated,
        )


class UploadResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    path: str
    version: Optional[str] = None
    download_url: Optional[str] = None
    html_url: Optional[str] = None
    created: bool
    commit: CommitResponse

    @classmethod
    def from_result(cls, result: UploadResult) -> "UploadResponse":
        return cls(
            message="File uploaded successfully" if result.created else "File updated successfully",
            path=result.path,
            version=result.version,
            download_url=result.download_url,
            html_url=result.html_url,
            created=result.created,
            commit=CommitResponse.from_commit(result.commit),
        )


class DeleteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    commit: CommitResponse


# ---------------------------------------------------------------------------
# Admin roster
# ---------------------------------------------------------------------------


class AdminRegistryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    super_admins: list[str]
    admins: list[str]
    version: Optional[str] = None

    @classmethod
    def from_registry(cls, registry: AdminRegistry) -> "AdminRegistryResponse":
        return cls(super_admins=registry.super_admins, admins=registry.admins, version=registry.version)


class AdminChangeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    registry: AdminRegistryResponse
    commit: CommitResponse


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    violations: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
