from sqlalchemy import select
from sqlalchemy.orm import Session

from stockconv.models.inventory import DepotVariant


def list_variants(db: Session, depot_id: int, product_id: int | None = None, include_inactive: bool = False):
    query = select(DepotVariant).where(DepotVariant.depot_id == depot_id)
    if product_id is not None:
        query = query.where(DepotVariant.product_id == product_id)
    if not include_inactive:
        query = query.where(DepotVariant.is_active.is_(True))
    return list(db.scalars(query.order_by(DepotVariant.product_id, DepotVariant.name)).all())


def variant_names(db: Session, variant_ids) -> dict[int, str]:
    ids = list(set(variant_ids))
    if not ids:
        return {}
    rows = db.execute(select(DepotVariant.id, DepotVariant.name).where(DepotVariant.id.in_(ids))).all()
    return {row.id: row.name for row in rows}
