# phm/models/boiler.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from phm.db import Base

FUEL_TYPES = ("gas", "oil", "electric", "lpg")
BOILER_TYPES = ("combi", "system", "regular")


class BoilerSpecification(Base):
    """Global reference catalog, shared by every account."""

    __tablename__ = "boiler_specifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    manufacturer: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    fuel_type: Mapped[str] = mapped_column(String(50), nullable=False)
    boiler_type: Mapped[str] = mapped_column(String(50), nullable=False)

    output_kw: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    flow_rate_lpm: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    dimensions: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    efficiency: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    erp_rating: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    flue_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    min_gas_pressure: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    max_gas_pressure: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    warranty: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    install_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    discontinued_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    replacement_model: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    datasheet_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<BoilerSpecification id={self.id} {self.manufacturer} {self.model}>"
