from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockconv.db.database import Base

# Ledger scale: every stored quantity has at most this many decimal places.
QUANTITY_PLACES = 4
QUANTITY_STEP = Decimal(1).scaleb(-QUANTITY_PLACES)
QUANTITY_PRECISION = 18
QUANTITY_INTEGER_DIGITS = QUANTITY_PRECISION - QUANTITY_PLACES
MAX_QUANTITY = Decimal(10) ** QUANTITY_INTEGER_DIGITS - QUANTITY_STEP


def quantity_column(**kwargs):
    return mapped_column(Numeric(QUANTITY_PRECISION, QUANTITY_PLACES), **kwargs)


class Depot(Base):
    __tablename__ = "depots"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(160), unique=True, index=True, nullable=False)
    unit: Mapped[str] = mapped_column(String(24), default="piece", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class DepotVariant(Base):
    __tablename__ = "depot_variants"
    __table_args__ = (
        UniqueConstraint("depot_id", "product_id", "name", name="uq_depot_variants_depot_product_name"),
        CheckConstraint("closing_qty >= 0", name="ck_depot_variants_closing_qty_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    depot_id: Mapped[int] = mapped_column(ForeignKey("depots.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    closing_qty: Mapped[Decimal] = quantity_column(default=Decimal("0"), nullable=False)
    # Bumped by every ledger mutation; compared on write for optimistic concurrency.
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
