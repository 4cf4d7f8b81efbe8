# phm/routers/media.py
import mimetypes
from pathlib import PurePath
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.errors import NotFoundError, ValidationError
from phm.core.logging_config import logger
from phm.core.settings import settings
from phm.db import get_db
from phm.models.user import User
from phm.models.visit import MediaAttachment, SurveyModule, VisitSession
from phm.observability.metrics import MEDIA_UPLOADS, UPLOAD_SIZE
from phm.schemas.visit import MediaAnnotateIn, MediaOut
from phm.services.storage import get_storage
from phm.services.tenancy import get_owned_or_404

router = APIRouter(prefix="/api/media", tags=["media"])

SUBDIRS = {"photo": "photos", "document": "documents"}
UPLOAD_CHUNK_BYTES = 1024 * 1024


def _safe_filename(name: str) -> str:
    """Strip any path and keep the name FS-safe."""
    name = PurePath(name).name
    return "".join(ch if ch.isalnum() or ch in (".", "-", "_", " ") else "_" for ch in name) or "upload"


def _guess_content_type(filename: str) -> str:
    ctype, _ = mimetypes.guess_type(filename)
    return ctype or "application/octet-stream"


def _bad_upload(field: str, message: str) -> ValidationError:
    return ValidationError(message, details=[{"field": field, "message": message, "type": "value_error"}])


async def _read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read the upload in chunks, giving up as soon as it passes ``max_bytes``."""
    too_big = _bad_upload("file", f"File exceeds the {settings.MAX_UPLOAD_MB} MB limit")
    if file.size is not None and file.size > max_bytes:
        raise too_big

    chunks = []
    received = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        received += len(chunk)
        if received > max_bytes:
            raise too_big
        chunks.append(chunk)
    return b"".join(chunks)


def _media_or_404(db: Session, media_id: int, user: User) -> MediaAttachment:
    media = (
        db.query(MediaAttachment)
        .join(VisitSession, VisitSession.id == MediaAttachment.visit_session_id)
        .filter(MediaAttachment.id == media_id, VisitSession.account_id == user.account_id)
        .first()
    )
    if media is None:
        raise NotFoundError("Media")
    return media


@router.post("/upload", status_code=201)
async def upload_media(
    visit_session_id: int = Form(..., alias="visitSessionId"),
    file_type: Literal["photo", "document"] = Form("photo", alias="fileType"),
    module_id: Optional[int] = Form(None, alias="moduleId"),
    caption: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = get_owned_or_404(db, VisitSession, visit_session_id, user.account_id, "Visit session")
    if module_id is not None:
        module = (
            db.query(SurveyModule)
            .filter(SurveyModule.id == module_id, SurveyModule.visit_session_id == visit.id)
            .first()
        )
        if module is None:
            raise NotFoundError("Module")

    if file is None or not file.filename:
        raise _bad_upload("file", "No file uploaded")

    data = await _read_limited(file, settings.MAX_UPLOAD_MB * 1024 * 1024)
    if not data:
        raise _bad_upload("file", "Uploaded file is empty")

    original_name = _safe_filename(file.filename)
    path = get_storage().save(SUBDIRS[file_type], original_name, data)

    media = MediaAttachment(
        visit_session_id=visit.id,
        module_id=module_id,
        file_type=file_type,
        file_name=original_name,
        file_path=path,
        file_size=len(data),
        mime_type=file.content_type or _guess_content_type(original_name),
        caption=caption,
    )
    db.add(media)
    db.commit()
    db.refresh(media)

    MEDIA_UPLOADS.labels(file_type=file_type).inc()
    UPLOAD_SIZE.observe(media.file_size)
    logger.info(
        "media_uploaded",
        account_id=user.account_id,
        visit_id=visit.id,
        media_id=media.id,
        size=media.file_size,
    )
    return {"data": MediaOut.model_validate(media), "message": "File uploaded successfully"}


@router.get("/file/{media_id}")
def get_media_file(
    media_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    media = _media_or_404(db, media_id, user)
    storage = get_storage()
    if not storage.exists(media.file_path):
        raise NotFoundError("File")

    return Response(
        content=storage.read(media.file_path),
        media_type=media.mime_type,
        headers={"Content-Disposition": f'inline; filename="{media.file_name}"'},
    )


@router.get("/{visit_session_id}")
def list_media(
    visit_session_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = get_owned_or_404(db, VisitSession, visit_session_id, user.account_id, "Visit session")
    rows = (
        db.query(MediaAttachment)
        .filter(MediaAttachment.visit_session_id == visit.id)
        .order_by(MediaAttachment.uploaded_at.desc(), MediaAttachment.id.desc())
        .all()
    )
    return {"data": [MediaOut.model_validate(m) for m in rows]}


@router.delete("/{media_id}")
def delete_media(
    media_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    media = _media_or_404(db, media_id, user)
    path = media.file_path
    db.delete(media)
    db.commit()
    # the row is gone either way; a stale file is only logged
    get_storage().delete(path)
    return {"message": "Media deleted successfully"}


@router.post("/{media_id}/annotate")
def annotate_media(
    media_id: int,
    payload: MediaAnnotateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    media = _media_or_404(db, media_id, user)
    sent = payload.model_dump(exclude_unset=True)
    if "caption" in sent:
        media.caption = payload.caption
    if "metadata" in sent:
        media.meta = payload.metadata
    db.commit()
    db.refresh(media)
    return {"data": MediaOut.model_validate(media), "message": "Media annotated"}
