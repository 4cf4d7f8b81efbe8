# phm/routers/visits.py
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.clock import utcnow
from phm.core.errors import NotFoundError
from phm.core.logging_config import logger
from phm.core.settings import settings
from phm.db import get_db
from phm.models.appointment import Appointment
from phm.models.customer import Customer
from phm.models.user import User
from phm.models.visit import SurveyModule, Transcription, VisitSession
from phm.schemas.common import PageParams
from phm.schemas.visit import (
    ModuleCreate,
    ModuleOut,
    ModuleUpdate,
    ShareOut,
    TranscriptionOut,
    VisitCompleteIn,
    VisitCreate,
    VisitDetailOut,
    VisitOut,
    VisitStatus,
    VisitUpdate,
)
from phm.services.audit import record_audit
from phm.services.pagination import paginate
from phm.services.tenancy import get_owned_or_404

router = APIRouter(prefix="/api/visits", tags=["visits"])


def _visit(db: Session, visit_id: int, user: User) -> VisitSession:
    return get_owned_or_404(db, VisitSession, visit_id, user.account_id, "Visit session")


def _module(db: Session, visit: VisitSession, module_id: int) -> SurveyModule:
    module = (
        db.query(SurveyModule)
        .filter(SurveyModule.id == module_id, SurveyModule.visit_session_id == visit.id)
        .first()
    )
    if module is None:
        raise NotFoundError("Module")
    return module


def share_url(share_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/view/{share_id}"


# ----------------------------------------------------
# Visit sessions
# ----------------------------------------------------
@router.get("")
def list_visits(
    customer_id: Optional[int] = Query(None, alias="customerId"),
    surveyor_id: Optional[int] = Query(None, alias="surveyorId"),
    status: Optional[VisitStatus] = None,
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(VisitSession).filter(VisitSession.account_id == user.account_id)
    if customer_id is not None:
        q = q.filter(VisitSession.customer_id == customer_id)
    if surveyor_id is not None:
        q = q.filter(VisitSession.surveyor_id == surveyor_id)
    if status:
        q = q.filter(VisitSession.status == status)

    q = q.order_by(VisitSession.started_at.desc(), VisitSession.id.desc())
    return paginate(q, paging, VisitOut.model_validate)


@router.post("", status_code=201)
def create_visit(
    payload: VisitCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_or_404(db, Customer, payload.customer_id, user.account_id, "Customer")
    if payload.appointment_id is not None:
        get_owned_or_404(db, Appointment, payload.appointment_id, user.account_id, "Appointment")

    visit = VisitSession(
        account_id=user.account_id,
        surveyor_id=user.id,
        status="in_progress",
        started_at=utcnow(),
        **payload.model_dump(),
    )
    db.add(visit)
    db.commit()
    db.refresh(visit)
    return {"data": VisitOut.model_validate(visit), "message": "Visit session started"}


@router.get("/{visit_id}")
def get_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    return {"data": VisitDetailOut.model_validate(visit)}


@router.put("/{visit_id}")
def update_visit(
    visit_id: int,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(visit, field, value)
    if changes.get("status") == "completed" and not visit.completed_at:
        visit.completed_at = utcnow()
    db.commit()
    db.refresh(visit)
    return {"data": VisitOut.model_validate(visit), "message": "Visit session updated"}


@router.delete("/{visit_id}")
def delete_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    db.delete(visit)
    db.commit()
    return {"message": "Visit session deleted successfully"}


@router.post("/{visit_id}/complete")
def complete_visit(
    visit_id: int,
    payload: Optional[VisitCompleteIn] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    visit.status = "completed"
    visit.completed_at = utcnow()
    if payload and payload.notes:
        visit.notes = payload.notes
    db.commit()
    db.refresh(visit)
    return {"data": VisitOut.model_validate(visit), "message": "Visit session completed"}


# ----------------------------------------------------
# Share links
# ----------------------------------------------------
@router.post("/{visit_id}/share")
def share_visit(
    visit_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Hand out the public report link. The token is minted once and then reused."""
    visit = _visit(db, visit_id, user)
    if not visit.share_id:
        visit.share_id = str(uuid4())
        record_audit(
            db,
            action="visit.share",
            account_id=user.account_id,
            user_id=user.id,
            entity_type="visit_session",
            entity_id=visit.id,
            request=request,
        )
        db.commit()
        db.refresh(visit)
        logger.info("visit_shared", account_id=user.account_id, visit_id=visit.id)

    out = ShareOut(share_id=visit.share_id, share_url=share_url(visit.share_id))
    return {"data": out, "message": "Share link created"}


@router.delete("/{visit_id}/share")
def revoke_share(
    visit_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    if visit.share_id:
        visit.share_id = None
        record_audit(
            db,
            action="visit.unshare",
            account_id=user.account_id,
            user_id=user.id,
            entity_type="visit_session",
            entity_id=visit.id,
            request=request,
        )
        db.commit()
    return {"message": "Share link revoked"}


# ----------------------------------------------------
# Survey modules
# ----------------------------------------------------
@router.get("/{visit_id}/modules")
def list_modules(
    visit_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    return {"data": [ModuleOut.model_validate(m) for m in visit.modules]}


@router.post("/{visit_id}/modules", status_code=201)
def create_module(
    visit_id: int,
    payload: ModuleCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    module = SurveyModule(
        visit_session_id=visit.id,
        module_type=payload.module_type,
        status="in_progress",
        data=payload.data or {},
        started_at=utcnow(),
    )
    db.add(module)
    db.commit()
    db.refresh(module)
    return {"data": ModuleOut.model_validate(module), "message": "Module created"}


@router.get("/{visit_id}/modules/{module_id}")
def get_module(
    visit_id: int,
    module_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = _module(db, _visit(db, visit_id, user), module_id)
    return {"data": ModuleOut.model_validate(module)}


@router.put("/{visit_id}/modules/{module_id}")
def update_module(
    visit_id: int,
    module_id: int,
    payload: ModuleUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = _module(db, _visit(db, visit_id, user), module_id)
    if payload.data is not None:
        module.data = payload.data
    if payload.status is not None:
        module.status = payload.status
        if payload.status == "completed" and not module.completed_at:
            module.completed_at = utcnow()
    db.commit()
    db.refresh(module)
    return {"data": ModuleOut.model_validate(module), "message": "Module updated"}


@router.delete("/{visit_id}/modules/{module_id}")
def delete_module(
    visit_id: int,
    module_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = _module(db, _visit(db, visit_id, user), module_id)
    db.delete(module)
    db.commit()
    return {"message": "Module deleted successfully"}


@router.post("/{visit_id}/modules/{module_id}/complete")
def complete_module(
    visit_id: int,
    module_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = _module(db, _visit(db, visit_id, user), module_id)
    module.status = "completed"
    module.completed_at = utcnow()
    db.commit()
    db.refresh(module)
    return {"data": ModuleOut.model_validate(module), "message": "Module completed"}


@router.get("/{visit_id}/transcriptions")
def list_transcriptions(
    visit_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    visit = _visit(db, visit_id, user)
    rows = (
        db.query(Transcription)
        .filter(Transcription.visit_session_id == visit.id)
        .order_by(Transcription.recorded_at.desc(), Transcription.id.desc())
        .all()
    )
    return {"data": [TranscriptionOut.model_validate(t) for t in rows]}
