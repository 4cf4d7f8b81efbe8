# phm/schemas/appointment.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import ValidationInfo, field_validator

from phm.schemas.common import CamelModel, UtcDatetime

AppointmentType = Literal["survey", "installation", "service", "callback"]
AppointmentStatus = Literal["scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show"]


class AppointmentCreate(CamelModel):
    customer_id: int
    quote_id: Optional[int] = None
    appointment_type: AppointmentType
    status: AppointmentStatus = "scheduled"
    scheduled_start: UtcDatetime
    scheduled_end: UtcDatetime
    assigned_to: Optional[int] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("scheduled_end")
    @classmethod
    def end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("scheduled_start")
        if start is not None and v <= start:
            raise ValueError("End time must be after start time")
        return v


class AppointmentUpdate(CamelModel):
    quote_id: Optional[int] = None
    appointment_type: Optional[AppointmentType] = None
    status: Optional[AppointmentStatus] = None
    scheduled_start: Optional[UtcDatetime] = None
    scheduled_end: Optional[UtcDatetime] = None
    actual_start: Optional[UtcDatetime] = None
    actual_end: Optional[UtcDatetime] = None
    assigned_to: Optional[int] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    cancelled_reason: Optional[str] = None


class AppointmentCheckinIn(CamelModel):
    actual_start: Optional[UtcDatetime] = None


class AppointmentCompleteIn(CamelModel):
    actual_end: Optional[UtcDatetime] = None
    notes: Optional[str] = None


class AppointmentCancelIn(CamelModel):
    cancelled_reason: Optional[str] = None


class AppointmentOut(CamelModel):
    id: int
    account_id: int
    customer_id: int
    quote_id: Optional[int] = None
    appointment_type: str
    status: str
    scheduled_start: datetime
    scheduled_end: datetime
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    assigned_to: Optional[int] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    cancelled_reason: Optional[str] = None
    reminder_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
