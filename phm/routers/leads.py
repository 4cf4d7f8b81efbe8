# phm/routers/leads.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.db import get_db
from phm.models.customer import Customer
from phm.models.lead import Lead
from phm.models.user import User
from phm.schemas.common import PageParams
from phm.schemas.lead import LeadCreate, LeadOut, LeadPriority, LeadStatus, LeadUpdate
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update, get_owned_or_404

router = APIRouter(prefix="/api/leads", tags=["leads"])

REQUIRED = ("status", "priority")


def _check_assignee(db: Session, account_id: int, user_id: Optional[int]) -> None:
    if user_id is not None:
        get_owned_or_404(db, User, user_id, account_id, "User")


@router.get("")
def list_leads(
    search: Optional[str] = None,
    status: Optional[LeadStatus] = None,
    priority: Optional[LeadPriority] = None,
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    customer_id: Optional[int] = Query(None, alias="customerId"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Lead).filter(Lead.account_id == user.account_id)
    if search:
        term = f"%{search}%"
        q = q.filter(or_(Lead.notes.ilike(term), Lead.source.ilike(term), Lead.campaign.ilike(term)))
    if status:
        q = q.filter(Lead.status == status)
    if priority:
        q = q.filter(Lead.priority == priority)
    if assigned_to is not None:
        q = q.filter(Lead.assigned_to == assigned_to)
    if customer_id is not None:
        q = q.filter(Lead.customer_id == customer_id)

    q = q.order_by(Lead.created_at.desc(), Lead.id.desc())
    return paginate(q, paging, LeadOut.model_validate)


@router.post("", status_code=201)
def create_lead(
    payload: LeadCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_or_404(db, Customer, payload.customer_id, user.account_id, "Customer")
    _check_assignee(db, user.account_id, payload.assigned_to)

    data = payload.model_dump()
    # unassigned leads land with whoever created them
    data["assigned_to"] = payload.assigned_to or user.id
    lead = Lead(account_id=user.account_id, **data)
    db.add(lead)
    db.commit()
    db.refresh(lead)
    return {"data": LeadOut.model_validate(lead), "message": "Lead created successfully"}


@router.get("/{lead_id}")
def get_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lead = get_owned_or_404(db, Lead, lead_id, user.account_id, "Lead")
    return {"data": LeadOut.model_validate(lead)}


@router.put("/{lead_id}")
def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lead = get_owned_or_404(db, Lead, lead_id, user.account_id, "Lead")
    _check_assignee(db, user.account_id, payload.assigned_to)
    apply_update(lead, payload, required=REQUIRED)
    db.commit()
    db.refresh(lead)
    return {"data": LeadOut.model_validate(lead), "message": "Lead updated successfully"}


@router.delete("/{lead_id}")
def delete_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lead = get_owned_or_404(db, Lead, lead_id, user.account_id, "Lead")
    db.delete(lead)
    db.commit()
    return {"message": "Lead deleted successfully"}
