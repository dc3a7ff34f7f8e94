import csv
import io
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from stockconv.api.deps import Operator, enforce_depot_scope, require_permission
from stockconv.core.config import settings
from stockconv.db.database import get_db
from stockconv.models.inventory import DepotVariant
from stockconv.schemas.conversion import (
    ConversionHistoryPageOut,
    ConversionIssueOut,
    ConversionRequestIn,
    ConversionResultOut,
    ConversionSuggestionOut,
    SingleConversionIn,
    ValidationOut,
)
from stockconv.schemas.inventory import DepotVariantOut
from stockconv.services.catalog import list_variants
from stockconv.services.errors import ConflictError, ValidationFailedError
from stockconv.services.executor import ConversionExecutor
from stockconv.services.history import ConversionHistory
from stockconv.services.ledger import StockLedger
from stockconv.services.suggestions import suggest
from stockconv.services.types import ConversionRequest, HistoryFilters
from stockconv.services.validator import validate

router = APIRouter(prefix="/unit-conversion", tags=["Unit Conversion"])


def _issues_out(issues) -> list[ConversionIssueOut]:
    return [ConversionIssueOut.model_validate(issue) for issue in issues]


def _execute(db: Session, request: ConversionRequest, current_operator: Operator) -> ConversionResultOut:
    enforce_depot_scope(current_operator, request.depot_id)
    try:
        result = ConversionExecutor(db).execute(request, performed_by=current_operator.username)
    except ValidationFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": "Conversion request is invalid",
                "errors": [issue.model_dump(mode="json") for issue in _issues_out(exc.errors)],
            },
        ) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return ConversionResultOut.model_validate(result)


@router.get("/depot/{depot_id}/variants", response_model=list[DepotVariantOut])
def get_depot_variants(
    depot_id: int,
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    depot_id = enforce_depot_scope(current_operator, depot_id)
    return list_variants(db, depot_id)


@router.get("/depot/{depot_id}/product/{product_id}/variants", response_model=list[DepotVariantOut])
def get_product_variants_in_depot(
    depot_id: int,
    product_id: int,
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    depot_id = enforce_depot_scope(current_operator, depot_id)
    return list_variants(db, depot_id, product_id)


@router.post("/validate", response_model=ValidationOut)
def validate_conversion(
    payload: ConversionRequestIn,
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    enforce_depot_scope(current_operator, payload.depot_id)
    request = payload.to_request()
    report = validate(request, StockLedger(db).snapshot(request.variant_ids()))
    return ValidationOut(
        is_valid=report.is_valid,
        errors=_issues_out(report.errors),
        warnings=_issues_out(report.warnings),
    )


@router.post("/bulk-convert", response_model=ConversionResultOut, status_code=status.HTTP_201_CREATED)
def bulk_convert(
    payload: ConversionRequestIn,
    current_operator: Operator = Depends(require_permission("conversion:execute")),
    db: Session = Depends(get_db),
):
    return _execute(db, payload.to_request(), current_operator)


@router.post("/convert", response_model=ConversionResultOut, status_code=status.HTTP_201_CREATED)
def convert(
    payload: SingleConversionIn,
    current_operator: Operator = Depends(require_permission("conversion:execute")),
    db: Session = Depends(get_db),
):
    return _execute(db, payload.to_request(), current_operator)


@router.get("/suggestions/{source_variant_id}", response_model=list[ConversionSuggestionOut])
def get_conversion_suggestions(
    source_variant_id: int,
    limit: int | None = Query(default=None, ge=1, le=20),
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    variant = db.get(DepotVariant, source_variant_id)
    if not variant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Variant not found")
    enforce_depot_scope(current_operator, variant.depot_id)
    return [ConversionSuggestionOut.model_validate(item) for item in suggest(db, source_variant_id, limit)]


def _history_filters(
    current_operator: Operator,
    depot_id: int | None,
    variant_id: int | None,
    batch_id: str | None,
    date_from: datetime | None,
    date_to: datetime | None,
    page: int = 1,
    limit: int | None = None,
) -> HistoryFilters:
    return HistoryFilters(
        depot_id=enforce_depot_scope(current_operator, depot_id),
        variant_id=variant_id,
        batch_id=batch_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=min(settings.history_default_page_size if limit is None else limit, settings.history_max_page_size),
    )


@router.get("/history", response_model=ConversionHistoryPageOut)
def get_conversion_history(
    depot_id: int | None = None,
    variant_id: int | None = None,
    batch_id: str | None = None,
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    filters = _history_filters(current_operator, depot_id, variant_id, batch_id, date_from, date_to, page, limit)
    return ConversionHistoryPageOut.model_validate(ConversionHistory(db).query(filters))


@router.get("/history/export/csv")
def export_conversion_history_csv(
    depot_id: int | None = None,
    variant_id: int | None = None,
    batch_id: str | None = None,
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    current_operator: Operator = Depends(require_permission("inventory:view")),
    db: Session = Depends(get_db),
):
    filters = _history_filters(current_operator, depot_id, variant_id, batch_id, date_from, date_to)
    items = ConversionHistory(db).export_rows(filters)
    sio = io.StringIO()
    writer = csv.writer(sio)
    writer.writerow(
        [
            "id",
            "batch_id",
            "depot_id",
            "source_variant_id",
            "source_variant_name",
            "source_quantity_consumed",
            "target_variant_id",
            "target_variant_name",
            "target_quantity_produced",
            "performed_by",
            "performed_at",
            "notes",
        ]
    )
    for r in items:
        writer.writerow(
            [
                r.id,
                r.batch_id,
                r.depot_id,
                r.source_variant_id,
                r.source_variant_name,
                str(r.source_quantity_consumed),
                r.target_variant_id,
                r.target_variant_name,
                str(r.target_quantity_produced),
                r.performed_by,
                r.performed_at.isoformat(),
                r.notes or "",
            ]
        )
    return Response(
        content=sio.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="unit-conversions.csv"'},
    )
