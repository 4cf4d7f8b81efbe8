# phm/schemas/product.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from phm.schemas.common import CamelModel, JsonMap


class ProductCreate(CamelModel):
    sku: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    manufacturer: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = Field(default=None, max_length=100)
    subcategory: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    specifications: Optional[JsonMap] = None
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    sell_price: Decimal = Field(ge=0)
    labor_hours: Optional[Decimal] = Field(default=None, ge=0)
    warranty_years: Optional[int] = Field(default=None, ge=0)
    stock_level: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    is_active: bool = True
    image_urls: Optional[List[str]] = None
    datasheet_url: Optional[str] = None


class ProductUpdate(CamelModel):
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    manufacturer: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = Field(default=None, max_length=100)
    subcategory: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    specifications: Optional[JsonMap] = None
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    sell_price: Optional[Decimal] = Field(default=None, ge=0)
    labor_hours: Optional[Decimal] = Field(default=None, ge=0)
    warranty_years: Optional[int] = Field(default=None, ge=0)
    stock_level: Optional[int] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    image_urls: Optional[List[str]] = None
    datasheet_url: Optional[str] = None


class ProductOut(CamelModel):
    id: int
    account_id: int
    sku: str
    name: str
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    specifications: Optional[JsonMap] = None
    cost_price: Optional[Decimal] = None
    sell_price: Decimal
    labor_hours: Optional[Decimal] = None
    warranty_years: Optional[int] = None
    stock_level: int
    min_stock_level: int
    is_active: bool
    image_urls: Optional[List[str]] = None
    datasheet_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductSearchHit(CamelModel):
    id: int
    sku: str
    name: str
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    sell_price: Decimal
