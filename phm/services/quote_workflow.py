# phm/services/quote_workflow.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy.orm import Session

from phm.core.clock import utcnow
from phm.core.errors import InvalidTransitionError, NotFoundError
from phm.core.logging_config import logger
from phm.core.settings import settings
from phm.models.customer import Customer
from phm.models.lead import Lead
from phm.models.product import Product
from phm.models.quote import Quote, QuoteLine
from phm.models.user import User
from phm.observability.metrics import QUOTE_STATUS_CHANGES, QUOTES_CREATED
from phm.schemas.quote import QuoteCreate, QuoteLineIn, QuoteUpdate
from phm.services.quote_numbers import next_quote_number
from phm.services.quote_totals import calculate_quote_totals, line_total, qmoney
from phm.services.tenancy import get_owned_or_404, reject_nulls

# expired is reachable from every state that is not final
QUOTE_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "draft": frozenset({"sent", "expired"}),
    "sent": frozenset({"sent", "viewed", "accepted", "rejected", "expired"}),
    "viewed": frozenset({"accepted", "rejected", "expired"}),
    "accepted": frozenset(),
    "rejected": frozenset(),
    "expired": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in QUOTE_TRANSITIONS.get(current, frozenset())


def assert_transition(quote: Quote, target: str, strict: Optional[bool] = None) -> None:
    """
    Status changes are advisory unless strict mode is on; then moves that
    are not in QUOTE_TRANSITIONS raise InvalidTransitionError.
    """
    if strict is None:
        strict = settings.QUOTE_STRICT_TRANSITIONS
    if strict and quote.status != target and not can_transition(quote.status, target):
        raise InvalidTransitionError("quote", quote.status, target)


# ----------------------------------------------------
# Lines & totals
# ----------------------------------------------------
def _check_products(db: Session, account_id: int, lines: Iterable[QuoteLineIn]) -> None:
    product_ids = {l.product_id for l in lines if l.product_id is not None}
    if not product_ids:
        return
    found = {
        pid
        for (pid,) in db.query(Product.id).filter(
            Product.id.in_(product_ids), Product.account_id == account_id
        )
    }
    if product_ids - found:
        raise NotFoundError("Product")


def _build_lines(lines: List[QuoteLineIn]) -> List[QuoteLine]:
    """Prices are stored to the penny; line and quote totals are worked out from the stored values."""
    rows = []
    for i, l in enumerate(lines):
        unit_price = qmoney(l.unit_price)
        discount = qmoney(l.discount)
        rows.append(
            QuoteLine(
                product_id=l.product_id,
                sort_order=i,
                description=l.description,
                quantity=l.quantity,
                unit_price=unit_price,
                discount=discount,
                line_total=line_total(l.quantity, unit_price, discount),
                notes=l.notes,
            )
        )
    return rows


def _apply_totals(quote: Quote, lines, tax_rate: Decimal) -> None:
    rate = qmoney(tax_rate)
    totals = calculate_quote_totals(lines, rate).rounded()
    quote.tax_rate = rate
    quote.subtotal = totals.subtotal
    quote.tax_amount = totals.tax_amount
    quote.total = totals.total


# ----------------------------------------------------
# Create / update / duplicate
# ----------------------------------------------------
def create_quote(db: Session, user: User, data: QuoteCreate) -> Quote:
    get_owned_or_404(db, Customer, data.customer_id, user.account_id, "Customer")
    if data.lead_id is not None:
        get_owned_or_404(db, Lead, data.lead_id, user.account_id, "Lead")
    _check_products(db, user.account_id, data.lines)

    quote = Quote(
        account_id=user.account_id,
        customer_id=data.customer_id,
        lead_id=data.lead_id,
        quote_number=next_quote_number(db, user.account_id),
        title=data.title,
        status="draft",
        valid_until=data.valid_until,
        deposit_amount=data.deposit_amount,
        notes=data.notes,
        terms_and_conditions=data.terms_and_conditions,
        created_by=user.id,
    )
    quote.lines = _build_lines(data.lines)
    _apply_totals(quote, quote.lines, data.tax_rate)
    db.add(quote)
    db.flush()
    QUOTES_CREATED.labels(source="new").inc()

    logger.info(
        "quote_created",
        account_id=user.account_id,
        quote_id=quote.id,
        quote_number=quote.quote_number,
        total=str(quote.total),
    )
    return quote


def update_quote(db: Session, user: User, quote: Quote, data: QuoteUpdate) -> Quote:
    changes = data.model_dump(exclude_unset=True, exclude={"lines"})
    reject_nulls(changes, ("title", "status"))

    if changes.get("lead_id") is not None:
        get_owned_or_404(db, Lead, changes["lead_id"], user.account_id, "Lead")
    if "status" in changes:
        assert_transition(quote, changes["status"])

    for field in ("lead_id", "title", "status", "valid_until", "deposit_amount", "notes", "terms_and_conditions"):
        if field in changes:
            setattr(quote, field, changes[field])

    tax_rate = data.tax_rate if data.tax_rate is not None else quote.tax_rate

    if data.lines is not None:
        _check_products(db, user.account_id, data.lines)
        # replace, never patch: old lines go, new ones are priced from scratch
        quote.lines.clear()
        db.flush()
        quote.lines.extend(_build_lines(data.lines))
        _apply_totals(quote, quote.lines, tax_rate)
    elif data.tax_rate is not None:
        _apply_totals(quote, quote.lines, tax_rate)

    db.add(quote)
    db.flush()
    return quote


def duplicate_quote(db: Session, user: User, source: Quote) -> Quote:
    """Copy as a fresh draft; lines and totals are copied as stored, not repriced."""
    clone = Quote(
        account_id=source.account_id,
        customer_id=source.customer_id,
        lead_id=source.lead_id,
        quote_number=next_quote_number(db, source.account_id),
        title=f"{source.title} (Copy)",
        status="draft",
        valid_until=source.valid_until,
        subtotal=source.subtotal,
        tax_rate=source.tax_rate,
        tax_amount=source.tax_amount,
        total=source.total,
        deposit_amount=source.deposit_amount,
        notes=source.notes,
        terms_and_conditions=source.terms_and_conditions,
        created_by=user.id,
    )
    clone.lines = [
        QuoteLine(
            product_id=l.product_id,
            sort_order=l.sort_order,
            description=l.description,
            quantity=l.quantity,
            unit_price=l.unit_price,
            discount=l.discount,
            line_total=l.line_total,
            notes=l.notes,
        )
        for l in source.lines
    ]
    db.add(clone)
    db.flush()
    QUOTES_CREATED.labels(source="duplicate").inc()
    logger.info(
        "quote_duplicated",
        account_id=source.account_id,
        source_id=source.id,
        quote_id=clone.id,
        quote_number=clone.quote_number,
    )
    return clone


# ----------------------------------------------------
# Status actions
# ----------------------------------------------------
def mark_quote_sent(db: Session, quote: Quote) -> None:
    assert_transition(quote, "sent")
    quote.status = "sent"
    quote.sent_at = utcnow()
    db.add(quote)
    QUOTE_STATUS_CHANGES.labels(to_status="sent").inc()


def mark_quote_accepted(db: Session, quote: Quote) -> None:
    assert_transition(quote, "accepted")
    quote.status = "accepted"
    quote.accepted_at = utcnow()
    db.add(quote)
    QUOTE_STATUS_CHANGES.labels(to_status="accepted").inc()


def mark_quote_rejected(db: Session, quote: Quote) -> None:
    assert_transition(quote, "rejected")
    quote.status = "rejected"
    quote.rejected_at = utcnow()
    db.add(quote)
    QUOTE_STATUS_CHANGES.labels(to_status="rejected").inc()
