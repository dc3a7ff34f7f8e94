import math
from typing import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from stockconv.models.conversion import ConversionRecord
from stockconv.services.types import HistoryFilters, HistoryPage


class ConversionHistory:
    """Append-only log of executed conversions. There is no update or delete path."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(self, records: Iterable[ConversionRecord]) -> list[ConversionRecord]:
        records = list(records)
        self.db.add_all(records)
        self.db.flush()
        return records

    def _filtered(self, query, filters: HistoryFilters):
        if filters.depot_id is not None:
            query = query.where(ConversionRecord.depot_id == filters.depot_id)
        if filters.variant_id is not None:
            query = query.where(
                or_(
                    ConversionRecord.source_variant_id == filters.variant_id,
                    ConversionRecord.target_variant_id == filters.variant_id,
                )
            )
        if filters.batch_id:
            query = query.where(ConversionRecord.batch_id == filters.batch_id)
        if filters.date_from is not None:
            query = query.where(ConversionRecord.performed_at >= filters.date_from)
        if filters.date_to is not None:
            query = query.where(ConversionRecord.performed_at <= filters.date_to)
        return query

    def query(self, filters: HistoryFilters) -> HistoryPage:
        if filters.page < 1:
            raise ValueError("page must be >= 1")
        if filters.limit < 1:
            raise ValueError("limit must be >= 1")

        total = self.db.scalar(self._filtered(select(func.count(ConversionRecord.id)), filters)) or 0
        items = self.db.scalars(
            self._filtered(select(ConversionRecord), filters)
            .order_by(ConversionRecord.performed_at.desc(), ConversionRecord.id.desc())
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        ).all()
        return HistoryPage(
            data=list(items),
            current_page=filters.page,
            total_pages=max(1, math.ceil(total / filters.limit)),
            total_records=total,
        )

    def export_rows(self, filters: HistoryFilters) -> list[ConversionRecord]:
        return list(
            self.db.scalars(
                self._filtered(select(ConversionRecord), filters).order_by(
                    ConversionRecord.performed_at.desc(),
                    ConversionRecord.id.desc(),
                )
            ).all()
        )

    def for_source(self, source_variant_id: int) -> list[ConversionRecord]:
        return list(
            self.db.scalars(
                select(ConversionRecord)
                .where(ConversionRecord.source_variant_id == source_variant_id)
                .order_by(ConversionRecord.performed_at.asc(), ConversionRecord.id.asc())
            ).all()
        )
