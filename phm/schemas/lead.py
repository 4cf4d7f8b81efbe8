# phm/schemas/lead.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from phm.schemas.common import CamelModel, UtcDatetime

LeadStatus = Literal["new", "contacted", "qualified", "converted", "lost"]
LeadPriority = Literal["low", "medium", "high", "urgent"]


class LeadCreate(CamelModel):
    customer_id: int
    source: Optional[str] = Field(default=None, max_length=100)
    campaign: Optional[str] = Field(default=None, max_length=100)
    status: LeadStatus = "new"
    priority: LeadPriority = "medium"
    estimated_value: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    next_follow_up: Optional[UtcDatetime] = None
    assigned_to: Optional[int] = None


class LeadUpdate(CamelModel):
    source: Optional[str] = Field(default=None, max_length=100)
    campaign: Optional[str] = Field(default=None, max_length=100)
    status: Optional[LeadStatus] = None
    priority: Optional[LeadPriority] = None
    estimated_value: Optional[Decimal] = Field(default=None, ge=0)
    lost_reason: Optional[str] = None
    notes: Optional[str] = None
    next_follow_up: Optional[UtcDatetime] = None
    assigned_to: Optional[int] = None


class LeadOut(CamelModel):
    id: int
    account_id: int
    customer_id: int
    source: Optional[str] = None
    campaign: Optional[str] = None
    status: str
    priority: str
    estimated_value: Optional[Decimal] = None
    lost_reason: Optional[str] = None
    notes: Optional[str] = None
    next_follow_up: Optional[datetime] = None
    assigned_to: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
