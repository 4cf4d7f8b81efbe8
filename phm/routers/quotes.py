# phm/routers/quotes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from phm.auth.deps import get_current_user
from phm.core.errors import NotFoundError
from phm.db import get_db
from phm.models.quote import Quote
from phm.models.user import User
from phm.schemas.common import PageParams
from phm.schemas.quote import QuoteCreate, QuoteDetailOut, QuoteOut, QuoteStatus, QuoteUpdate
from phm.services import quote_workflow
from phm.services.audit import record_audit
from phm.services.pagination import paginate
from phm.services.tenancy import get_owned_or_404

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


def _detail(quote: Quote) -> QuoteDetailOut:
    # after commit everything is expired; this reloads the quote with its lines
    return QuoteDetailOut.model_validate(quote)


@router.get("")
def list_quotes(
    search: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
    customer_id: Optional[int] = Query(None, alias="customerId"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Quote).filter(Quote.account_id == user.account_id)
    if search:
        term = f"%{search}%"
        q = q.filter(or_(Quote.quote_number.ilike(term), Quote.title.ilike(term), Quote.notes.ilike(term)))
    if status:
        q = q.filter(Quote.status == status)
    if customer_id is not None:
        q = q.filter(Quote.customer_id == customer_id)

    q = q.order_by(Quote.created_at.desc(), Quote.id.desc())
    return paginate(q, paging, QuoteOut.model_validate)


@router.post("", status_code=201)
def create_quote(
    payload: QuoteCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = quote_workflow.create_quote(db, user, payload)
    record_audit(
        db,
        action="quote.create",
        account_id=user.account_id,
        user_id=user.id,
        entity_type="quote",
        entity_id=quote.id,
        changes={"quoteNumber": quote.quote_number, "total": str(quote.total)},
        request=request,
    )
    db.commit()
    return {"data": _detail(quote), "message": "Quote created successfully"}


@router.get("/{quote_id}")
def get_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = (
        db.query(Quote)
        .options(selectinload(Quote.lines))
        .filter(Quote.id == quote_id, Quote.account_id == user.account_id)
        .first()
    )
    if quote is None:
        raise NotFoundError("Quote")
    return {"data": QuoteDetailOut.model_validate(quote)}


@router.put("/{quote_id}")
def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    quote_workflow.update_quote(db, user, quote, payload)
    db.commit()
    return {"data": _detail(quote), "message": "Quote updated successfully"}


@router.delete("/{quote_id}")
def delete_quote(
    quote_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    record_audit(
        db,
        action="quote.delete",
        account_id=user.account_id,
        user_id=user.id,
        entity_type="quote",
        entity_id=quote.id,
        changes={"quoteNumber": quote.quote_number},
        request=request,
    )
    db.delete(quote)
    db.commit()
    return {"message": "Quote deleted successfully"}


# ----------------------------------------------------
# Actions
# ----------------------------------------------------
@router.post("/{quote_id}/send")
def send_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # TODO: deliver the quote by e-mail once an outbound mail provider is configured
    quote = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    quote_workflow.mark_quote_sent(db, quote)
    db.commit()
    return {"data": _detail(quote), "message": "Quote sent successfully"}


@router.post("/{quote_id}/accept")
def accept_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    quote_workflow.mark_quote_accepted(db, quote)
    db.commit()
    return {"data": _detail(quote), "message": "Quote accepted"}


@router.post("/{quote_id}/reject")
def reject_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    quote_workflow.mark_quote_rejected(db, quote)
    db.commit()
    return {"data": _detail(quote), "message": "Quote rejected"}


@router.post("/{quote_id}/duplicate", status_code=201)
def duplicate_quote(
    quote_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    source = get_owned_or_404(db, Quote, quote_id, user.account_id, "Quote")
    clone = quote_workflow.duplicate_quote(db, user, source)
    record_audit(
        db,
        action="quote.duplicate",
        account_id=user.account_id,
        user_id=user.id,
        entity_type="quote",
        entity_id=clone.id,
        changes={"sourceId": source.id, "quoteNumber": clone.quote_number},
        request=request,
    )
    db.commit()
    return {"data": _detail(clone), "message": "Quote duplicated successfully"}
