# phm/schemas/customer.py
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, EmailStr, Field

from phm.schemas.common import CamelModel

PropertyType = Literal["detached", "semi", "terraced", "flat", "bungalow"]


def _check_construction_year(value: Optional[int]) -> Optional[int]:
    if value is not None and not (1800 <= value <= date.today().year):
        raise ValueError(f"Construction year must be between 1800 and {date.today().year}")
    return value


ConstructionYear = Annotated[int, AfterValidator(_check_construction_year)]


class CustomerCreate(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    alt_phone: Optional[str] = Field(default=None, max_length=50)
    address_line1: Optional[str] = Field(default=None, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    postcode: str = Field(min_length=1, max_length=20)
    country: str = "UK"
    property_type: Optional[PropertyType] = None
    construction_year: Optional[ConstructionYear] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class CustomerUpdate(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    alt_phone: Optional[str] = Field(default=None, max_length=50)
    address_line1: Optional[str] = Field(default=None, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    postcode: Optional[str] = Field(default=None, min_length=1, max_length=20)
    country: Optional[str] = None
    property_type: Optional[PropertyType] = None
    construction_year: Optional[ConstructionYear] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class CustomerOut(CamelModel):
    id: int
    account_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    alt_phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postcode: str
    country: str
    property_type: Optional[str] = None
    construction_year: Optional[int] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicCustomerOut(CamelModel):
    """What a share-link viewer may see: name, address and property, no contact details."""

    first_name: str
    last_name: str
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postcode: str
    property_type: Optional[str] = None
    construction_year: Optional[int] = None
