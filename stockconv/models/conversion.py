from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stockconv.db.database import Base
from stockconv.models.inventory import quantity_column


class ConversionRecord(Base):
    """One executed source -> target pair. Rows are never updated or deleted."""

    __tablename__ = "unit_conversions"
    __table_args__ = (Index("ix_unit_conversions_depot_performed", "depot_id", "performed_at", "id"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    batch_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    depot_id: Mapped[int] = mapped_column(ForeignKey("depots.id", ondelete="RESTRICT"), index=True, nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    source_variant_id: Mapped[int] = mapped_column(
        ForeignKey("depot_variants.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    source_variant_name: Mapped[str] = mapped_column(String(160), nullable=False)
    source_quantity_consumed: Mapped[Decimal] = quantity_column(nullable=False)
    target_variant_id: Mapped[int] = mapped_column(
        ForeignKey("depot_variants.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    target_variant_name: Mapped[str] = mapped_column(String(160), nullable=False)
    target_quantity_produced: Mapped[Decimal] = quantity_column(nullable=False)
    performed_by: Mapped[str] = mapped_column(String(120), nullable=False)
    performed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
