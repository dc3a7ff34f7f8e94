from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from stockconv.services.errors import IssueCode
from stockconv.services.types import ConversionRequest, TargetAllocation


class TargetAllocationIn(BaseModel):
    target_variant_id: int
    target_quantity: Decimal


class ConversionRequestIn(BaseModel):
    # Quantities are left unconstrained here; the validator reports them per row.
    depot_id: int
    source_variant_id: int
    source_quantity: Decimal
    targets: list[TargetAllocationIn] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=500)

    def to_request(self) -> ConversionRequest:
        return ConversionRequest(
            depot_id=self.depot_id,
            source_variant_id=self.source_variant_id,
            source_quantity=self.source_quantity,
            targets=tuple(TargetAllocation(t.target_variant_id, t.target_quantity) for t in self.targets),
            notes=self.notes,
        )


class SingleConversionIn(BaseModel):
    depot_id: int
    source_variant_id: int
    target_variant_id: int
    source_quantity: Decimal
    target_quantity: Decimal
    notes: str | None = Field(default=None, max_length=500)

    def to_request(self) -> ConversionRequest:
        return ConversionRequest(
            depot_id=self.depot_id,
            source_variant_id=self.source_variant_id,
            source_quantity=self.source_quantity,
            targets=(TargetAllocation(self.target_variant_id, self.target_quantity),),
            notes=self.notes,
        )


class ConversionIssueOut(BaseModel):
    code: IssueCode
    message: str
    field: str
    row: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class ValidationOut(BaseModel):
    is_valid: bool
    errors: list[ConversionIssueOut]
    warnings: list[ConversionIssueOut]


class ConversionRecordOut(BaseModel):
    id: int
    batch_id: str
    depot_id: int
    product_id: int
    source_variant_id: int
    source_variant_name: str
    source_quantity_consumed: Decimal
    target_variant_id: int
    target_variant_name: str
    target_quantity_produced: Decimal
    performed_by: str
    performed_at: datetime
    notes: str | None

    model_config = {"from_attributes": True}


class StockChangeOut(BaseModel):
    variant_id: int
    name: str
    previous_qty: Decimal
    new_qty: Decimal

    model_config = {"from_attributes": True}


class ConversionResultOut(BaseModel):
    success: bool
    batch_id: str
    records: list[ConversionRecordOut]
    stock_changes: list[StockChangeOut]

    model_config = {"from_attributes": True}


class ConversionSuggestionOut(BaseModel):
    target_variant_id: int
    target_variant_name: str
    suggested_ratio: Decimal
    description: str
    sample_count: int

    model_config = {"from_attributes": True}


class ConversionHistoryPageOut(BaseModel):
    data: list[ConversionRecordOut]
    current_page: int
    total_pages: int
    total_records: int

    model_config = {"from_attributes": True}
