# phm/schemas/quote.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from phm.core.settings import settings
from phm.schemas.common import CamelModel

QuoteStatus = Literal["draft", "sent", "viewed", "accepted", "rejected", "expired"]


class QuoteLineIn(CamelModel):
    product_id: Optional[int] = None
    description: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class QuoteCreate(CamelModel):
    customer_id: int
    lead_id: Optional[int] = None
    title: str = Field(min_length=1, max_length=255)
    valid_until: Optional[date] = None
    tax_rate: Decimal = Field(default=Decimal(settings.DEFAULT_TAX_RATE), ge=0, le=100)
    deposit_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    lines: List[QuoteLineIn] = Field(min_length=1)


class QuoteUpdate(CamelModel):
    lead_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[QuoteStatus] = None
    valid_until: Optional[date] = None
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    deposit_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    lines: Optional[List[QuoteLineIn]] = Field(default=None, min_length=1)


class QuoteLineOut(CamelModel):
    id: int
    product_id: Optional[int] = None
    sort_order: int
    description: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    line_total: Decimal
    notes: Optional[str] = None


class QuoteOut(CamelModel):
    id: int
    account_id: int
    customer_id: int
    lead_id: Optional[int] = None
    quote_number: str
    title: str
    status: str
    valid_until: Optional[date] = None
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    deposit_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuoteDetailOut(QuoteOut):
    lines: List[QuoteLineOut] = []
