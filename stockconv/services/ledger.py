"""Per-depot, per-variant quantity-on-hand store.

Every change to ``DepotVariant.closing_qty`` goes through ``StockLedger.apply_delta``.
The ledger only flushes statements; committing or rolling back is the caller's job.
"""

from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stockconv.models.inventory import MAX_QUANTITY, QUANTITY_PLACES, QUANTITY_STEP, DepotVariant
from stockconv.services.errors import InsufficientStockError, StaleVersionError, UnknownVariantError
from stockconv.services.types import LedgerSnapshot, VariantSnapshot


def to_quantity(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(QUANTITY_STEP)


class StockLedger:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _read_row(self, variant_id: int):
        return self.db.execute(
            select(
                DepotVariant.id,
                DepotVariant.depot_id,
                DepotVariant.product_id,
                DepotVariant.name,
                DepotVariant.closing_qty,
                DepotVariant.version,
                DepotVariant.is_active,
            ).where(DepotVariant.id == variant_id)
        ).first()

    def get_quantity(self, depot_id: int, variant_id: int) -> tuple[Decimal, int]:
        row = self._read_row(variant_id)
        if row is None or row.depot_id != depot_id:
            raise UnknownVariantError(depot_id, variant_id)
        return to_quantity(row.closing_qty), row.version

    def snapshot(self, variant_ids: Iterable[int]) -> LedgerSnapshot:
        ids = sorted({int(variant_id) for variant_id in variant_ids})
        if not ids:
            return {}
        rows = self.db.execute(
            select(
                DepotVariant.id,
                DepotVariant.depot_id,
                DepotVariant.product_id,
                DepotVariant.name,
                DepotVariant.closing_qty,
                DepotVariant.version,
                DepotVariant.is_active,
            ).where(DepotVariant.id.in_(ids))
        ).all()
        return {
            row.id: VariantSnapshot(
                id=row.id,
                depot_id=row.depot_id,
                product_id=row.product_id,
                name=row.name,
                closing_qty=to_quantity(row.closing_qty),
                version=row.version,
                is_active=row.is_active,
            )
            for row in rows
        }

    def apply_delta(self, depot_id: int, variant_id: int, delta: Decimal, expected_version: int) -> int:
        delta = Decimal(delta)
        if not delta.is_finite() or delta.as_tuple().exponent < -QUANTITY_PLACES:
            raise ValueError(f"Delta {delta} is not a finite amount with at most {QUANTITY_PLACES} decimal places")
        row = self._read_row(variant_id)
        if row is None or row.depot_id != depot_id:
            raise UnknownVariantError(depot_id, variant_id)
        if row.version != expected_version:
            raise StaleVersionError(variant_id, expected_version, row.version)

        current = to_quantity(row.closing_qty)
        new_qty = current + delta
        if new_qty < 0:
            raise InsufficientStockError(variant_id, requested=-delta, available=current)
        if new_qty > MAX_QUANTITY:
            raise ValueError(f"Variant {variant_id} cannot hold more than {MAX_QUANTITY}")

        new_version = expected_version + 1
        result = self.db.execute(
            update(DepotVariant)
            .where(
                DepotVariant.id == variant_id,
                DepotVariant.depot_id == depot_id,
                DepotVariant.version == expected_version,
            )
            .values(closing_qty=new_qty, version=new_version)
            .execution_options(synchronize_session=False)
        )
        # Another writer committed between the read and the update.
        if result.rowcount != 1:
            raise StaleVersionError(variant_id, expected_version, None)
        return new_version
