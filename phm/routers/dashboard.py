# phm/routers/dashboard.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.clock import utcnow
from phm.db import get_db
from phm.models.appointment import Appointment
from phm.models.customer import Customer
from phm.models.lead import Lead
from phm.models.quote import Quote
from phm.models.user import User
from phm.models.visit import VisitSession
from phm.schemas.appointment import AppointmentOut
from phm.schemas.quote import QuoteOut
from phm.schemas.visit import VisitOut
from phm.services.quote_totals import qmoney
from phm.services.reporting import GroupBy, group_revenue, resolve_window

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

CLOSED_LEAD_STATUSES = ("converted", "lost")


def _money(value) -> str:
    return str(qmoney(Decimal(str(value or 0))))


def _period(start: datetime, end: datetime) -> dict:
    return {"start": start.isoformat(), "end": end.isoformat()}


@router.get("/stats")
def stats(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Headline numbers for the home screen; the window defaults to the last 30 days."""
    start, end = resolve_window(start_date, end_date, default_days=30)
    account_id = user.account_id

    customers = db.query(func.count(Customer.id)).filter(Customer.account_id == account_id).scalar()
    active_leads = (
        db.query(func.count(Lead.id))
        .filter(Lead.account_id == account_id, Lead.status.notin_(CLOSED_LEAD_STATUSES))
        .scalar()
    )
    quotes_issued = (
        db.query(func.count(Quote.id))
        .filter(Quote.account_id == account_id, Quote.created_at >= start, Quote.created_at <= end)
        .scalar()
    )
    revenue = (
        db.query(func.sum(Quote.total))
        .filter(
            Quote.account_id == account_id,
            Quote.status == "accepted",
            Quote.accepted_at >= start,
            Quote.accepted_at <= end,
        )
        .scalar()
    )
    upcoming = (
        db.query(func.count(Appointment.id))
        .filter(
            Appointment.account_id == account_id,
            Appointment.status == "scheduled",
            Appointment.scheduled_start >= utcnow(),
        )
        .scalar()
    )
    surveys = (
        db.query(func.count(VisitSession.id))
        .filter(
            VisitSession.account_id == account_id,
            VisitSession.status == "completed",
            VisitSession.completed_at >= start,
            VisitSession.completed_at <= end,
        )
        .scalar()
    )

    return {
        "data": {
            "totalCustomers": customers or 0,
            "activeLeads": active_leads or 0,
            "quotesIssued": quotes_issued or 0,
            "revenue": _money(revenue),
            "upcomingAppointments": upcoming or 0,
            "completedSurveys": surveys or 0,
            "period": _period(start, end),
        }
    }


@router.get("/revenue")
def revenue(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    group_by: GroupBy = Query("month", alias="groupBy"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    start, end = resolve_window(start_date, end_date, default_days=365)
    rows = (
        db.query(Quote.accepted_at, Quote.total)
        .filter(
            Quote.account_id == user.account_id,
            Quote.status == "accepted",
            Quote.accepted_at >= start,
            Quote.accepted_at <= end,
        )
        .all()
    )
    return {
        "data": {
            "revenue": group_revenue(rows, group_by),
            "groupBy": group_by,
            "period": _period(start, end),
        }
    }


@router.get("/conversion")
def conversion(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    leads = (
        db.query(Lead.status, func.count(Lead.id))
        .filter(Lead.account_id == user.account_id)
        .group_by(Lead.status)
        .order_by(Lead.status)
        .all()
    )
    quotes = (
        db.query(Quote.status, func.count(Quote.id), func.sum(Quote.total))
        .filter(Quote.account_id == user.account_id)
        .group_by(Quote.status)
        .order_by(Quote.status)
        .all()
    )
    return {
        "data": {
            "leads": [{"status": s, "count": c} for s, c in leads],
            "quotes": [{"status": s, "count": c, "totalValue": _money(v)} for s, c, v in quotes],
        }
    }


@router.get("/surveyor-performance")
def surveyor_performance(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    start, end = resolve_window(start_date, end_date, default_days=30)
    surveys = (
        db.query(VisitSession.surveyor_id, func.count(VisitSession.id))
        .filter(
            VisitSession.account_id == user.account_id,
            VisitSession.status == "completed",
            VisitSession.completed_at >= start,
            VisitSession.completed_at <= end,
        )
        .group_by(VisitSession.surveyor_id)
        .all()
    )
    appointments = (
        db.query(Appointment.assigned_to, func.count(Appointment.id))
        .filter(
            Appointment.account_id == user.account_id,
            Appointment.status == "completed",
            Appointment.actual_end >= start,
            Appointment.actual_end <= end,
        )
        .group_by(Appointment.assigned_to)
        .all()
    )
    return {
        "data": {
            "surveyors": [{"surveyorId": sid, "completedSurveys": c} for sid, c in surveys],
            "appointments": [{"assignedTo": uid, "completedAppointments": c} for uid, c in appointments],
            "period": _period(start, end),
        }
    }


@router.get("/recent-activity")
def recent_activity(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quotes = (
        db.query(Quote)
        .filter(Quote.account_id == user.account_id)
        .order_by(Quote.created_at.desc(), Quote.id.desc())
        .limit(limit)
        .all()
    )
    appointments = (
        db.query(Appointment)
        .filter(Appointment.account_id == user.account_id)
        .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        .limit(limit)
        .all()
    )
    surveys = (
        db.query(VisitSession)
        .filter(VisitSession.account_id == user.account_id)
        .order_by(VisitSession.started_at.desc(), VisitSession.id.desc())
        .limit(limit)
        .all()
    )
    return {
        "data": {
            "quotes": [QuoteOut.model_validate(q) for q in quotes],
            "appointments": [AppointmentOut.model_validate(a) for a in appointments],
            "surveys": [VisitOut.model_validate(v) for v in surveys],
        }
    }
