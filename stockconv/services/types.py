from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class TargetAllocation:
    target_variant_id: int
    target_quantity: Decimal


@dataclass(frozen=True)
class ConversionRequest:
    depot_id: int | None
    source_variant_id: int
    source_quantity: Decimal
    targets: tuple[TargetAllocation, ...] = ()
    notes: str | None = None

    def variant_ids(self) -> set[int]:
        ids = {self.source_variant_id}
        ids.update(target.target_variant_id for target in self.targets)
        return ids


@dataclass(frozen=True)
class VariantSnapshot:
    id: int
    depot_id: int
    product_id: int
    name: str
    closing_qty: Decimal
    version: int
    is_active: bool = True


LedgerSnapshot = dict[int, VariantSnapshot]


@dataclass(frozen=True)
class StockChange:
    variant_id: int
    name: str
    previous_qty: Decimal
    new_qty: Decimal


@dataclass(frozen=True)
class ConversionSuggestion:
    target_variant_id: int
    target_variant_name: str
    suggested_ratio: Decimal
    description: str
    sample_count: int


@dataclass(frozen=True)
class HistoryFilters:
    depot_id: int | None = None
    variant_id: int | None = None
    batch_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: int = 1
    limit: int = 20


@dataclass
class HistoryPage:
    data: list = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_records: int = 0
