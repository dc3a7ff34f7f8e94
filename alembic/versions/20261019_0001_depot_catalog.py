"""depot catalog schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "depots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_depots_code"), "depots", ["code"], unique=True)
    op.create_index(op.f("ix_depots_id"), "depots", ["id"], unique=False)
    op.create_index(op.f("ix_depots_name"), "depots", ["name"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("unit", sa.String(length=24), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index(op.f("ix_products_name"), "products", ["name"], unique=True)

    op.create_table(
        "depot_variants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("depot_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("closing_qty", sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("closing_qty >= 0", name="ck_depot_variants_closing_qty_non_negative"),
        sa.ForeignKeyConstraint(["depot_id"], ["depots.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("depot_id", "product_id", "name", name="uq_depot_variants_depot_product_name"),
    )
    op.create_index(op.f("ix_depot_variants_id"), "depot_variants", ["id"], unique=False)
    op.create_index(op.f("ix_depot_variants_depot_id"), "depot_variants", ["depot_id"], unique=False)
    op.create_index(op.f("ix_depot_variants_product_id"), "depot_variants", ["product_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_depot_variants_product_id"), table_name="depot_variants")
    op.drop_index(op.f("ix_depot_variants_depot_id"), table_name="depot_variants")
    op.drop_index(op.f("ix_depot_variants_id"), table_name="depot_variants")
    op.drop_table("depot_variants")
    op.drop_index(op.f("ix_products_name"), table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")
    op.drop_index(op.f("ix_depots_name"), table_name="depots")
    op.drop_index(op.f("ix_depots_id"), table_name="depots")
    op.drop_index(op.f("ix_depots_code"), table_name="depots")
    op.drop_table("depots")
