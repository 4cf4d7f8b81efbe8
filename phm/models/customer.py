# phm/models/customer.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phm.db import Base

PROPERTY_TYPES = ("detached", "semi", "terraced", "flat", "bungalow")


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # contact
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    alt_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # address
    address_line1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postcode: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="UK")

    # property
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    construction_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    leads: Mapped[List["Lead"]] = relationship(
        "Lead", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )
    quotes: Mapped[List["Quote"]] = relationship(
        "Quote", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )
    visits: Mapped[List["VisitSession"]] = relationship(
        "VisitSession", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Customer id={self.id} account={self.account_id} name={self.full_name!r}>"
