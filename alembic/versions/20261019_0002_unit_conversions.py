"""unit conversion history table

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, Sequence[str], None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "unit_conversions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.String(length=32), nullable=False),
        sa.Column("depot_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("source_variant_id", sa.Integer(), nullable=False),
        sa.Column("source_variant_name", sa.String(length=160), nullable=False),
        sa.Column("source_quantity_consumed", sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column("target_variant_id", sa.Integer(), nullable=False),
        sa.Column("target_variant_name", sa.String(length=160), nullable=False),
        sa.Column("target_quantity_produced", sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column("performed_by", sa.String(length=120), nullable=False),
        sa.Column("performed_at", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(["depot_id"], ["depots.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["source_variant_id"], ["depot_variants.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["target_variant_id"], ["depot_variants.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_unit_conversions_id"), "unit_conversions", ["id"], unique=False)
    op.create_index(op.f("ix_unit_conversions_batch_id"), "unit_conversions", ["batch_id"], unique=False)
    op.create_index(op.f("ix_unit_conversions_depot_id"), "unit_conversions", ["depot_id"], unique=False)
    op.create_index(
        op.f("ix_unit_conversions_source_variant_id"),
        "unit_conversions",
        ["source_variant_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_unit_conversions_target_variant_id"),
        "unit_conversions",
        ["target_variant_id"],
        unique=False,
    )
    op.create_index(op.f("ix_unit_conversions_performed_at"), "unit_conversions", ["performed_at"], unique=False)
    op.create_index(
        "ix_unit_conversions_depot_performed",
        "unit_conversions",
        ["depot_id", "performed_at", "id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_unit_conversions_depot_performed", table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_performed_at"), table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_target_variant_id"), table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_source_variant_id"), table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_depot_id"), table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_batch_id"), table_name="unit_conversions")
    op.drop_index(op.f("ix_unit_conversions_id"), table_name="unit_conversions")
    op.drop_table("unit_conversions")
