# phm/routers/transcription.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.clock import utcnow
from phm.core.errors import NotFoundError
from phm.core.logging_config import logger
from phm.core.settings import settings
from phm.db import get_db
from phm.models.user import User
from phm.models.visit import SurveyModule, Transcription, VisitObservation, VisitSession
from phm.schemas.visit import (
    ExtractObservationsIn,
    ObservationCreate,
    ObservationOut,
    ObservationUpdate,
    TranscriptionCreate,
    TranscriptionOut,
)
from phm.services.observations import get_extractor
from phm.services.tenancy import apply_update, get_owned_or_404
from phm.services.transcription_stream import transcription_events

router = APIRouter(prefix="/api/transcription", tags=["transcription"])


def _visit(db: Session, visit_id: int, user: User) -> VisitSession:
    return get_owned_or_404(db, VisitSession, visit_id, user.account_id, "Visit session")


def _transcription_in_visit(db: Session, visit: VisitSession, transcription_id: int) -> Transcription:
    row = (
        db.query(Transcription)
        .filter(Transcription.id == transcription_id, Transcription.visit_session_id == visit.id)
        .first()
    )
    if row is None:
        raise NotFoundError("Transcription")
    return row


def _observation_or_404(db: Session, observation_id: int, user: User) -> VisitObservation:
    row = (
        db.query(VisitObservation)
        .join(VisitSession, VisitSession.id == VisitObservation.visit_session_id)
        .filter(VisitObservation.id == observation_id, VisitSession.account_id == user.account_id)
        .first()
    )
    if row is None:
        raise NotFoundError("Observation")
    return row


# ----------------------------------------------------
# Transcripts
# ----------------------------------------------------
@router.post("/upload", status_code=201)
def upload_transcription(
    payload: TranscriptionCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, payload.visit_session_id, user)
    if payload.module_id is not None:
        found = (
            db.query(SurveyModule.id)
            .filter(SurveyModule.id == payload.module_id, SurveyModule.visit_session_id == visit.id)
            .first()
        )
        if found is None:
            raise NotFoundError("Module")

    data = payload.model_dump(exclude_none=True)
    transcription = Transcription(processed_at=utcnow(), **data)
    db.add(transcription)
    db.commit()
    db.refresh(transcription)
    return {"data": TranscriptionOut.model_validate(transcription), "message": "Transcription saved"}


@router.get("/stream/{visit_session_id}")
def stream_transcription(
    visit_session_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _visit(db, visit_session_id, user)
    return StreamingResponse(
        transcription_events(
            visit_session_id,
            request.is_disconnected,
            heartbeat_seconds=settings.TRANSCRIPTION_HEARTBEAT_SECONDS,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


@router.post("/extract-observations")
def extract_observations(
    payload: ExtractObservationsIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Run the extractor over a transcript and store what it finds on the visit."""
    visit = _visit(db, payload.visit_session_id, user)
    text = payload.transcript_text or ""
    if payload.transcription_id is not None:
        transcription = _transcription_in_visit(db, visit, payload.transcription_id)
        text = text or transcription.transcript_text

    found = get_extractor().extract(text)
    rows = [
        VisitObservation(
            visit_session_id=visit.id,
            transcription_id=payload.transcription_id,
            observation_type=o.observation_type,
            category=o.category,
            key=o.key,
            value=o.value,
            confidence=o.confidence,
            context=o.context,
        )
        for o in found
    ]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)

    logger.info("observations_extracted", visit_id=visit.id, count=len(rows))
    return {
        "data": {
            "count": len(rows),
            "observations": [ObservationOut.model_validate(r) for r in rows],
        },
        "message": f"Extracted {len(rows)} observations",
    }


# ----------------------------------------------------
# Observations
# ----------------------------------------------------
@router.post("/observations", status_code=201)
def create_observation(
    payload: ObservationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, payload.visit_session_id, user)
    if payload.transcription_id is not None:
        _transcription_in_visit(db, visit, payload.transcription_id)

    observation = VisitObservation(**payload.model_dump())
    db.add(observation)
    db.commit()
    db.refresh(observation)
    return {"data": ObservationOut.model_validate(observation), "message": "Observation created"}


@router.get("/observations/{visit_session_id}")
def list_observations(
    visit_session_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_session_id, user)
    return {"data": [ObservationOut.model_validate(o) for o in visit.observations]}


@router.put("/observations/{observation_id}")
def update_observation(
    observation_id: int,
    payload: ObservationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    observation = _observation_or_404(db, observation_id, user)
    apply_update(
        observation,
        payload,
        required=("observation_type", "category", "key", "value", "confidence"),
    )
    db.commit()
    db.refresh(observation)
    return {"data": ObservationOut.model_validate(observation), "message": "Observation updated"}


@router.delete("/observations/{observation_id}")
def delete_observation(
    observation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    observation = _observation_or_404(db, observation_id, user)
    db.delete(observation)
    db.commit()
    return {"message": "Observation deleted successfully"}
