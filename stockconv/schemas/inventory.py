from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ProductUnit = Literal["piece", "ml", "litre", "g", "kg", "pack", "crate"]


class DepotCreate(BaseModel):
    code: str = Field(min_length=2, max_length=64)
    name: str = Field(min_length=2, max_length=120)
    address: str | None = Field(default=None, max_length=255)


class DepotOut(BaseModel):
    id: int
    code: str
    name: str
    address: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductCreate(BaseModel):
    name: str = Field(min_length=2, max_length=160)
    unit: ProductUnit = "piece"


class ProductOut(BaseModel):
    id: int
    name: str
    unit: ProductUnit
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DepotVariantCreate(BaseModel):
    depot_id: int
    product_id: int
    name: str = Field(min_length=1, max_length=160)
    closing_qty: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)


class DepotVariantOut(BaseModel):
    id: int
    depot_id: int
    product_id: int
    name: str
    closing_qty: Decimal
    version: int
    is_active: bool
    updated_at: datetime

    model_config = {"from_attributes": True}
