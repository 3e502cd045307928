"""
api/routes/v1/notes.py -- Study material routes.

Routes:
  GET    /notes               -- public listing (nested + flat), cacheable 60s
  POST   /notes               -- upload a PDF (admin), multipart/form-data
  DELETE /notes/{path:path}   -- delete a PDF (admin), ?version=<token>;
                                 path is relative to the notes root
                                 (a leading "notes/" is accepted)

The store credential comes from the X-Store-Credential header. It is
optional for the listing (it only raises the store's rate limit) and required
for both writes.

Handlers are plain def and run in the threadpool, since every store call
blocks. upload_note is async only to await UploadFile.read.

File uploads:
  The body is read up to max_material_bytes + 1 so an oversized upload is
  reported as a validation violation without buffering the whole file.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from api.models import CommitResponse, DeleteResponse, NotesListResponse, UploadResponse
from auth.dependencies import get_store_credential, require_admin
from auth.models import Session
from content import materials
from content.listing import list_notes
from core.config import get_settings

router = APIRouter()


@router.get("/notes", response_model=NotesListResponse)
def get_notes(
    request: Request,
    credential: Optional[str] = Depends(get_store_credential),
) -> JSONResponse:
    """Walk the notes namespace and return every PDF.

    Public endpoint -- the student-facing notes page renders from this.
    An empty or missing namespace is a 200 with total=0.
    """
    settings = get_settings()
    listing = list_notes(
        request.app.state.store,
        credential,
        settings.notes_root,
        settings.listing_max_depth,
        settings.listing_max_entries,
    )
    resp = JSONResponse(content=NotesListResponse.from_listing(listing).model_dump(mode="json"))
    resp.headers["Cache-Control"] = f"public, max-age={settings.listing_cache_seconds}"
    return resp


@router.post("/notes", response_model=UploadResponse)
async def upload_note(
    request: Request,
    file: Optional[UploadFile] = File(default=None),
    class_no: Optional[str] = Form(default=None),
    stream: Optional[str] = Form(default=None),
    subject: Optional[str] = Form(default=None),
    file_name: Optional[str] = Form(default=None),
    commit_message: Optional[str] = Form(default=None),
    session: Session = Depends(require_admin),
    credential: Optional[str] = Depends(get_store_credential),
) -> UploadResponse:
    """Create or replace a note file.

    file_name overrides the uploaded file's own name when given. All field
    problems come back together as one 400 with a violations list.
    """
    limit = get_settings().max_material_bytes
    material = await file.read(limit + 1) if file is not None else b""
    filename = file_name or (file.filename if file is not None else None)

    result = await run_in_threadpool(
        materials.upload,
        request.app.state.store,
        session,
        material,
        class_no,
        stream,
        subject,
        filename,
        credential,
        commit_message,
    )
    return UploadResponse.from_result(result)


@router.delete("/notes/{path:path}", response_model=DeleteResponse)
def delete_note(
    request: Request,
    path: str,
    version: Optional[str] = Query(default=None),
    session: Session = Depends(require_admin),
    credential: Optional[str] = Depends(get_store_credential),
) -> DeleteResponse:
    """Delete a note file. path is relative to the notes root; version must be
    the token seen in the listing.

    409 if the file changed since that listing; 404 if it is already gone.
    """
    root = get_settings().notes_root
    # Accept the full store path from the listing as well as the relative one.
    relative = path[len(root) + 1 :] if path.startswith(f"{root}/") else path
    commit = materials.delete(
        request.app.state.store,
        session,
        f"{root}/{relative}",
        version,
        credential,
    )
    return DeleteResponse(message="Note deleted successfully", commit=CommitResponse.from_commit(commit))
