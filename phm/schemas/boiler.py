# phm/schemas/boiler.py
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from phm.schemas.common import CamelModel, JsonMap

FuelType = Literal["gas", "oil", "electric", "lpg"]
BoilerType = Literal["combi", "system", "regular"]


class BoilerCreate(CamelModel):
    manufacturer: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=255)
    fuel_type: FuelType
    boiler_type: BoilerType
    output_kw: Optional[Decimal] = Field(default=None, ge=0)
    flow_rate_lpm: Optional[Decimal] = Field(default=None, ge=0)
    dimensions: Optional[JsonMap] = None
    weight: Optional[Decimal] = Field(default=None, ge=0)
    efficiency: Optional[Decimal] = Field(default=None, ge=0, le=100)
    erp_rating: Optional[str] = Field(default=None, max_length=10)
    flue_type: Optional[str] = Field(default=None, max_length=50)
    min_gas_pressure: Optional[Decimal] = None
    max_gas_pressure: Optional[Decimal] = None
    warranty: Optional[int] = Field(default=None, ge=0)
    install_date: Optional[date] = None
    discontinued_date: Optional[date] = None
    replacement_model: Optional[str] = Field(default=None, max_length=255)
    datasheet_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True


class BoilerUpdate(CamelModel):
    manufacturer: Optional[str] = Field(default=None, min_length=1, max_length=100)
    model: Optional[str] = Field(default=None, min_length=1, max_length=255)
    fuel_type: Optional[FuelType] = None
    boiler_type: Optional[BoilerType] = None
    output_kw: Optional[Decimal] = Field(default=None, ge=0)
    flow_rate_lpm: Optional[Decimal] = Field(default=None, ge=0)
    dimensions: Optional[JsonMap] = None
    weight: Optional[Decimal] = Field(default=None, ge=0)
    efficiency: Optional[Decimal] = Field(default=None, ge=0, le=100)
    erp_rating: Optional[str] = Field(default=None, max_length=10)
    flue_type: Optional[str] = Field(default=None, max_length=50)
    min_gas_pressure: Optional[Decimal] = None
    max_gas_pressure: Optional[Decimal] = None
    warranty: Optional[int] = Field(default=None, ge=0)
    install_date: Optional[date] = None
    discontinued_date: Optional[date] = None
    replacement_model: Optional[str] = Field(default=None, max_length=255)
    datasheet_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class BoilerOut(CamelModel):
    id: int
    manufacturer: str
    model: str
    fuel_type: str
    boiler_type: str
    output_kw: Optional[Decimal] = None
    flow_rate_lpm: Optional[Decimal] = None
    dimensions: Optional[JsonMap] = None
    weight: Optional[Decimal] = None
    efficiency: Optional[Decimal] = None
    erp_rating: Optional[str] = None
    flue_type: Optional[str] = None
    min_gas_pressure: Optional[Decimal] = None
    max_gas_pressure: Optional[Decimal] = None
    warranty: Optional[int] = None
    install_date: Optional[date] = None
    discontinued_date: Optional[date] = None
    replacement_model: Optional[str] = None
    datasheet_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BoilerIdentifyIn(CamelModel):
    image_url: Optional[str] = None
    description: Optional[str] = None
