# phm/routers/appointments.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.clock import as_utc, utcnow
from phm.core.errors import ValidationError
from phm.db import get_db
from phm.models.appointment import Appointment
from phm.models.customer import Customer
from phm.models.quote import Quote
from phm.models.user import User
from phm.schemas.appointment import (
    AppointmentCancelIn,
    AppointmentCheckinIn,
    AppointmentCompleteIn,
    AppointmentCreate,
    AppointmentOut,
    AppointmentStatus,
    AppointmentUpdate,
)
from phm.schemas.common import PageParams
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update, get_owned_or_404

router = APIRouter(prefix="/api/appointments", tags=["appointments"])

REQUIRED = ("appointment_type", "status", "scheduled_start", "scheduled_end")


def _check_refs(db: Session, account_id: int, quote_id: Optional[int], assigned_to: Optional[int]) -> None:
    if quote_id is not None:
        get_owned_or_404(db, Quote, quote_id, account_id, "Quote")
    if assigned_to is not None:
        get_owned_or_404(db, User, assigned_to, account_id, "User")


def _check_window(start: Optional[datetime], end: Optional[datetime], field: str) -> None:
    start, end = as_utc(start), as_utc(end)
    if start is not None and end is not None and end <= start:
        raise ValidationError(
            "Invalid request data",
            details=[{"field": field, "message": "End time must be after start time", "type": "value_error"}],
        )


@router.get("")
def list_appointments(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    status: Optional[AppointmentStatus] = None,
    customer_id: Optional[int] = Query(None, alias="customerId"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Appointment).filter(Appointment.account_id == user.account_id)
    if start is not None:
        q = q.filter(Appointment.scheduled_start >= as_utc(start))
    if end is not None:
        q = q.filter(Appointment.scheduled_start <= as_utc(end))
    if assigned_to is not None:
        q = q.filter(Appointment.assigned_to == assigned_to)
    if status:
        q = q.filter(Appointment.status == status)
    if customer_id is not None:
        q = q.filter(Appointment.customer_id == customer_id)

    q = q.order_by(Appointment.scheduled_start.asc(), Appointment.id.asc())
    return paginate(q, paging, AppointmentOut.model_validate)


@router.post("", status_code=201)
def create_appointment(
    payload: AppointmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_or_404(db, Customer, payload.customer_id, user.account_id, "Customer")
    _check_refs(db, user.account_id, payload.quote_id, payload.assigned_to)

    appointment = Appointment(account_id=user.account_id, **payload.model_dump())
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return {"data": AppointmentOut.model_validate(appointment), "message": "Appointment created successfully"}


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    return {"data": AppointmentOut.model_validate(appointment)}


@router.put("/{appointment_id}")
def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    _check_refs(db, user.account_id, payload.quote_id, payload.assigned_to)

    # validate the window the row will end up with, not just the fields sent
    sent = payload.model_dump(exclude_unset=True)
    _check_window(
        sent.get("scheduled_start", appointment.scheduled_start),
        sent.get("scheduled_end", appointment.scheduled_end),
        "scheduledEnd",
    )
    _check_window(
        sent.get("actual_start", appointment.actual_start),
        sent.get("actual_end", appointment.actual_end),
        "actualEnd",
    )

    apply_update(appointment, payload, required=REQUIRED)
    db.commit()
    db.refresh(appointment)
    return {"data": AppointmentOut.model_validate(appointment), "message": "Appointment updated successfully"}


@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    db.delete(appointment)
    db.commit()
    return {"message": "Appointment deleted successfully"}


# ----------------------------------------------------
# Field actions
# ----------------------------------------------------
@router.post("/{appointment_id}/checkin")
def check_in(
    appointment_id: int,
    payload: Optional[AppointmentCheckinIn] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    appointment.status = "in_progress"
    appointment.actual_start = (payload and payload.actual_start) or utcnow()
    db.commit()
    db.refresh(appointment)
    return {"data": AppointmentOut.model_validate(appointment), "message": "Checked in successfully"}


@router.post("/{appointment_id}/complete")
def complete(
    appointment_id: int,
    payload: Optional[AppointmentCompleteIn] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    actual_end = (payload and payload.actual_end) or utcnow()
    _check_window(appointment.actual_start, actual_end, "actualEnd")

    appointment.status = "completed"
    appointment.actual_end = actual_end
    if payload and payload.notes:
        appointment.notes = payload.notes
    db.commit()
    db.refresh(appointment)
    return {"data": AppointmentOut.model_validate(appointment), "message": "Appointment completed"}


@router.post("/{appointment_id}/cancel")
def cancel(
    appointment_id: int,
    payload: Optional[AppointmentCancelIn] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = get_owned_or_404(db, Appointment, appointment_id, user.account_id, "Appointment")
    appointment.status = "cancelled"
    appointment.cancelled_reason = payload.cancelled_reason if payload else None
    db.commit()
    db.refresh(appointment)
    return {"data": AppointmentOut.model_validate(appointment), "message": "Appointment cancelled"}
