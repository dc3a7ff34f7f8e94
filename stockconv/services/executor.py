"""Atomic execution of unit conversions against the stock ledger.

All ledger deltas and the history rows of one request are written in a single
database transaction. Concurrency is optimistic: each delta carries the version
read in the snapshot, and a mismatch aborts the whole batch with ``ConflictError``.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockconv.models.conversion import ConversionRecord
from stockconv.services.allocation import apportion
from stockconv.services.errors import (
    ConflictError,
    InsufficientStockError,
    StaleVersionError,
    ValidationFailedError,
)
from stockconv.services.history import ConversionHistory
from stockconv.services.ledger import StockLedger, to_quantity
from stockconv.services.types import ConversionRequest, StockChange, TargetAllocation
from stockconv.services.validator import validate

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    batch_id: str
    records: list[ConversionRecord] = field(default_factory=list)
    stock_changes: list[StockChange] = field(default_factory=list)
    success: bool = True


class ConversionExecutor:
    def __init__(
        self,
        db: Session,
        ledger: StockLedger | None = None,
        history: ConversionHistory | None = None,
    ) -> None:
        self.db = db
        self.ledger = ledger or StockLedger(db)
        self.history = history or ConversionHistory(db)

    def execute(self, request: ConversionRequest, performed_by: str) -> ConversionResult:
        snapshot = self.ledger.snapshot(request.variant_ids())
        report = validate(request, snapshot)
        if report.errors:
            self.db.rollback()
            logger.warning(
                "conversion rejected depot=%s source=%s errors=%s",
                request.depot_id,
                request.source_variant_id,
                [issue.code.value for issue in report.errors],
            )
            raise ValidationFailedError(report.errors)

        source = snapshot[request.source_variant_id]
        source_quantity = to_quantity(request.source_quantity)
        target_quantities = [to_quantity(target.target_quantity) for target in request.targets]
        consumed = apportion(source_quantity, target_quantities)

        deltas: dict[int, Decimal] = {source.id: -source_quantity}
        for allocation, quantity in zip(request.targets, target_quantities):
            deltas[allocation.target_variant_id] = deltas.get(allocation.target_variant_id, Decimal("0")) + quantity

        try:
            # Stable order so that writers sharing variants touch rows in the same sequence.
            for variant_id in sorted(deltas):
                self.ledger.apply_delta(
                    request.depot_id,
                    variant_id,
                    deltas[variant_id],
                    snapshot[variant_id].version,
                )
        except (StaleVersionError, InsufficientStockError) as exc:
            self.db.rollback()
            logger.warning(
                "conversion conflict depot=%s source=%s: %s",
                request.depot_id,
                request.source_variant_id,
                exc,
            )
            raise ConflictError() from exc

        batch_id = uuid.uuid4().hex
        performed_at = datetime.utcnow()
        notes = request.notes.strip() if request.notes and request.notes.strip() else None
        records = [
            ConversionRecord(
                batch_id=batch_id,
                depot_id=request.depot_id,
                product_id=source.product_id,
                source_variant_id=source.id,
                source_variant_name=source.name,
                source_quantity_consumed=share,
                target_variant_id=allocation.target_variant_id,
                target_variant_name=snapshot[allocation.target_variant_id].name,
                target_quantity_produced=quantity,
                performed_by=performed_by,
                performed_at=performed_at,
                notes=notes,
            )
            for allocation, quantity, share in zip(request.targets, target_quantities, consumed)
        ]

        try:
            self.history.append(records)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("conversion history append failed depot=%s batch=%s", request.depot_id, batch_id)
            raise

        for record in records:
            self.db.refresh(record)

        stock_changes = [
            StockChange(
                variant_id=variant_id,
                name=snapshot[variant_id].name,
                previous_qty=snapshot[variant_id].closing_qty,
                new_qty=snapshot[variant_id].closing_qty + deltas[variant_id],
            )
            for variant_id in sorted(deltas)
        ]
        logger.info(
            "conversion executed batch=%s depot=%s source=%s consumed=%s targets=%d by=%s",
            batch_id,
            request.depot_id,
            source.id,
            source_quantity,
            len(records),
            performed_by,
        )
        return ConversionResult(batch_id=batch_id, records=records, stock_changes=stock_changes)

    def execute_single(
        self,
        depot_id: int,
        source_variant_id: int,
        target_variant_id: int,
        source_quantity: Decimal,
        target_quantity: Decimal,
        performed_by: str,
        notes: str | None = None,
    ) -> ConversionResult:
        request = ConversionRequest(
            depot_id=depot_id,
            source_variant_id=source_variant_id,
            source_quantity=source_quantity,
            targets=(TargetAllocation(target_variant_id, target_quantity),),
            notes=notes,
        )
        return self.execute(request, performed_by)
