# phm/routers/customers.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.db import get_db
from phm.models.customer import Customer
from phm.models.quote import Quote
from phm.models.user import User
from phm.models.visit import VisitSession
from phm.schemas.common import PageParams, split_csv
from phm.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate
from phm.schemas.quote import QuoteOut
from phm.schemas.visit import VisitOut
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update, get_owned_or_404

router = APIRouter(prefix="/api/customers", tags=["customers"])

REQUIRED = ("first_name", "last_name", "postcode", "country")


@router.get("")
def list_customers(
    search: Optional[str] = None,
    property_type: Optional[str] = Query(None, alias="propertyType"),
    tags: Optional[str] = Query(None, description="comma separated; matches any"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Customer).filter(Customer.account_id == user.account_id)
    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Customer.first_name.ilike(term),
                Customer.last_name.ilike(term),
                Customer.email.ilike(term),
                Customer.postcode.ilike(term),
            )
        )
    if property_type:
        q = q.filter(Customer.property_type == property_type)
    tag_list = split_csv(tags)
    if tag_list:
        # tags live in a JSON array; match the quoted value in its text form
        as_text = cast(Customer.tags, String)
        q = q.filter(or_(*[as_text.like(f'%"{t}"%') for t in tag_list]))

    q = q.order_by(Customer.created_at.desc(), Customer.id.desc())
    return paginate(q, paging, CustomerOut.model_validate)


@router.post("", status_code=201)
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    customer = Customer(account_id=user.account_id, **payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return {"data": CustomerOut.model_validate(customer), "message": "Customer created successfully"}


@router.get("/{customer_id}")
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    customer = get_owned_or_404(db, Customer, customer_id, user.account_id, "Customer")
    return {"data": CustomerOut.model_validate(customer)}


@router.put("/{customer_id}")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    customer = get_owned_or_404(db, Customer, customer_id, user.account_id, "Customer")
    apply_update(customer, payload, required=REQUIRED)
    db.commit()
    db.refresh(customer)
    return {"data": CustomerOut.model_validate(customer), "message": "Customer updated successfully"}


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    customer = get_owned_or_404(db, Customer, customer_id, user.account_id, "Customer")
    db.delete(customer)
    db.commit()
    return {"message": "Customer deleted successfully"}


@router.get("/{customer_id}/quotes")
def customer_quotes(
    customer_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_or_404(db, Customer, customer_id, user.account_id, "Customer")
    quotes = (
        db.query(Quote)
        .filter(Quote.customer_id == customer_id, Quote.account_id == user.account_id)
        .order_by(Quote.created_at.desc(), Quote.id.desc())
        .all()
    )
    return {"data": [QuoteOut.model_validate(q) for q in quotes]}


@router.get("/{customer_id}/visits")
def customer_visits(
    customer_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_or_404(db, Customer, customer_id, user.account_id, "Customer")
    visits = (
        db.query(VisitSession)
        .filter(VisitSession.customer_id == customer_id, VisitSession.account_id == user.account_id)
        .order_by(VisitSession.started_at.desc(), VisitSession.id.desc())
        .all()
    )
    return {"data": [VisitOut.model_validate(v) for v in visits]}
