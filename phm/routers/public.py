# phm/routers/public.py
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from phm.core.errors import NotFoundError
from phm.db import get_db
from phm.models.customer import Customer
from phm.models.visit import MediaAttachment, SurveyModule, VisitObservation, VisitSession
from phm.schemas.customer import PublicCustomerOut
from phm.schemas.visit import MediaOut, ModuleOut, ObservationOut, PublicVisitOut
from phm.services.storage import get_storage

# No authentication here: the share id is the only credential.
router = APIRouter(prefix="/api/public", tags=["public"])


def _shared_visit(db: Session, share_id: str) -> VisitSession:
    visit = db.query(VisitSession).filter(VisitSession.share_id == share_id).first()
    if visit is None:
        raise NotFoundError("Shared visit")
    return visit


@router.get("/view/{share_id}")
def view_shared_visit(share_id: str, db: Session = Depends(get_db)):
    visit = _shared_visit(db, share_id)
    customer = db.query(Customer).filter(Customer.id == visit.customer_id).first()

    modules = (
        db.query(SurveyModule)
        .filter(SurveyModule.visit_session_id == visit.id)
        .order_by(SurveyModule.started_at.asc(), SurveyModule.id.asc())
        .all()
    )
    observations = (
        db.query(VisitObservation)
        .filter(VisitObservation.visit_session_id == visit.id)
        .order_by(VisitObservation.created_at.desc(), VisitObservation.id.desc())
        .all()
    )
    media = (
        db.query(MediaAttachment)
        .filter(MediaAttachment.visit_session_id == visit.id)
        .order_by(MediaAttachment.uploaded_at.desc(), MediaAttachment.id.desc())
        .all()
    )

    return {
        "data": {
            "visit": PublicVisitOut.model_validate(visit),
            "customer": PublicCustomerOut.model_validate(customer) if customer else None,
            "modules": [ModuleOut.model_validate(m) for m in modules],
            "observations": [ObservationOut.model_validate(o) for o in observations],
            "media": [MediaOut.model_validate(m) for m in media],
        }
    }


@router.get("/view/{share_id}/media/{media_id}")
def shared_media_file(share_id: str, media_id: int, db: Session = Depends(get_db)):
    visit = _shared_visit(db, share_id)
    media = (
        db.query(MediaAttachment)
        .filter(MediaAttachment.id == media_id, MediaAttachment.visit_session_id == visit.id)
        .first()
    )
    storage = get_storage()
    if media is None or not storage.exists(media.file_path):
        raise NotFoundError("File")

    return Response(
        content=storage.read(media.file_path),
        media_type=media.mime_type,
        headers={"Content-Disposition": f'inline; filename="{media.file_name}"'},
    )
