from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockconv.api.deps import Operator, enforce_depot_scope, require_permission
from stockconv.db.database import get_db
from stockconv.models.inventory import Depot, DepotVariant, Product
from stockconv.schemas.inventory import (
    DepotCreate,
    DepotOut,
    DepotVariantCreate,
    DepotVariantOut,
    ProductCreate,
    ProductOut,
)
from stockconv.services.catalog import list_variants

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.post("/depots", response_model=DepotOut, status_code=status.HTTP_201_CREATED)
def create_depot(
    payload: DepotCreate,
    _: Operator = Depends(require_permission("inventory:manage")),
    db: Session = Depends(get_db),
):
    depot = Depot(code=payload.code.strip().upper(), name=payload.name.strip(), address=payload.address)
    db.add(depot)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Depot code already exists") from exc
    db.refresh(depot)
    return depot


@router.get("/depots", response_model=list[DepotOut])
def list_depots(
    include_inactive: bool = False,
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    query = select(Depot).order_by(Depot.name)
    if current_operator.depot_id is not None:
        query = query.where(Depot.id == current_operator.depot_id)
    if not include_inactive:
        query = query.where(Depot.is_active.is_(True))
    return list(db.scalars(query).all())


@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    _: Operator = Depends(require_permission("inventory:manage")),
    db: Session = Depends(get_db),
):
    product = Product(name=payload.name.strip(), unit=payload.unit)
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product name already exists") from exc
    db.refresh(product)
    return product


@router.get("/products", response_model=list[ProductOut])
def list_products(
    _: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    return list(db.scalars(select(Product).where(Product.is_active.is_(True)).order_by(Product.name)).all())


@router.post("/variants", response_model=DepotVariantOut, status_code=status.HTTP_201_CREATED)
def create_variant(
    payload: DepotVariantCreate,
    _: Operator = Depends(require_permission("inventory:manage")),
    db: Session = Depends(get_db),
):
    depot = db.get(Depot, payload.depot_id)
    if not depot:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Depot not found")
    if not depot.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot add variants to an inactive depot")
    product = db.get(Product, payload.product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    variant = DepotVariant(
        depot_id=depot.id,
        product_id=product.id,
        name=payload.name.strip(),
        closing_qty=payload.closing_qty,
    )
    db.add(variant)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Variant name already exists for this product in this depot",
        ) from exc
    db.refresh(variant)
    return variant


@router.get("/variants", response_model=list[DepotVariantOut])
def list_depot_variants(
    depot_id: int,
    product_id: int | None = None,
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    depot_id = enforce_depot_scope(current_operator, depot_id)
    return list_variants(db, depot_id, product_id)
