"""Side-effect free checks of a conversion request against a ledger snapshot."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from stockconv.models.inventory import MAX_QUANTITY, QUANTITY_INTEGER_DIGITS, QUANTITY_PLACES
from stockconv.services.allocation import apportion
from stockconv.services.errors import ConversionIssue, IssueCode
from stockconv.services.types import ConversionRequest, LedgerSnapshot


@dataclass
class ValidationReport:
    errors: list[ConversionIssue] = field(default_factory=list)
    warnings: list[ConversionIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _quantity_problem(value) -> str | None:
    try:
        quantity = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return "must be a number"
    if not quantity.is_finite():
        return "must be a finite number"
    if quantity <= 0:
        return "must be greater than 0"
    if quantity.adjusted() >= QUANTITY_INTEGER_DIGITS:
        return f"must not exceed {MAX_QUANTITY}"
    if quantity.as_tuple().exponent < -QUANTITY_PLACES:
        return f"must have at most {QUANTITY_PLACES} decimal places"
    return None


def validate(request: ConversionRequest, snapshot: LedgerSnapshot) -> ValidationReport:
    report = ValidationReport()
    errors = report.errors

    source = None
    if not request.depot_id or request.depot_id <= 0:
        errors.append(ConversionIssue(IssueCode.UNKNOWN_VARIANT, "Depot is required", field="depot_id"))
    else:
        source = snapshot.get(request.source_variant_id)
        if source is None or source.depot_id != request.depot_id:
            errors.append(
                ConversionIssue(
                    IssueCode.UNKNOWN_VARIANT,
                    f"Source variant {request.source_variant_id} not found in depot {request.depot_id}",
                    field="source_variant_id",
                )
            )
            source = None
        elif not source.is_active:
            errors.append(
                ConversionIssue(
                    IssueCode.UNKNOWN_VARIANT,
                    f"Source variant {source.name} is inactive",
                    field="source_variant_id",
                )
            )
            source = None

    source_quantity_ok = True
    problem = _quantity_problem(request.source_quantity)
    if problem:
        source_quantity_ok = False
        errors.append(
            ConversionIssue(IssueCode.INVALID_QUANTITY, f"Source quantity {problem}", field="source_quantity")
        )

    if not request.targets:
        errors.append(
            ConversionIssue(IssueCode.EMPTY_TARGET_SET, "At least one target variant is required", field="targets")
        )

    target_quantities_ok = bool(request.targets)
    for row, allocation in enumerate(request.targets):
        target = snapshot.get(allocation.target_variant_id)
        target_error = None
        if allocation.target_variant_id == request.source_variant_id:
            target_error = "Source and target variants cannot be the same"
        elif target is None or target.depot_id != request.depot_id:
            target_error = f"Target variant {allocation.target_variant_id} not found in depot {request.depot_id}"
        elif not target.is_active:
            target_error = f"Target variant {target.name} is inactive"
        elif source is not None and target.product_id != source.product_id:
            target_error = f"Target variant {target.name} belongs to a different product than the source"
        if target_error:
            errors.append(
                ConversionIssue(IssueCode.INVALID_TARGET, target_error, field="target_variant_id", row=row)
            )

        problem = _quantity_problem(allocation.target_quantity)
        if problem:
            target_quantities_ok = False
            errors.append(
                ConversionIssue(
                    IssueCode.INVALID_QUANTITY,
                    f"Target quantity {problem}",
                    field="target_quantity",
                    row=row,
                )
            )

    if source is not None and source_quantity_ok:
        requested = Decimal(request.source_quantity)
        if requested > source.closing_qty:
            errors.append(
                ConversionIssue(
                    IssueCode.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {source.name}: requested {requested}, available {source.closing_qty}",
                    field="source_quantity",
                    details={"requested": str(requested), "available": str(source.closing_qty)},
                )
            )

    rows_by_target: dict[int, list[int]] = {}
    for row, allocation in enumerate(request.targets):
        rows_by_target.setdefault(allocation.target_variant_id, []).append(row)

    if target_quantities_ok:
        for target_variant_id, rows in rows_by_target.items():
            target = snapshot.get(target_variant_id)
            if target is None:
                continue
            credited = sum((Decimal(request.targets[row].target_quantity) for row in rows), Decimal("0"))
            if target.closing_qty + credited > MAX_QUANTITY:
                errors.append(
                    ConversionIssue(
                        IssueCode.INVALID_QUANTITY,
                        f"Target quantity would take {target.name} above {MAX_QUANTITY}",
                        field="target_quantity",
                        row=rows[0],
                    )
                )

    if source_quantity_ok and target_quantities_ok:
        shares = apportion(
            Decimal(request.source_quantity),
            [Decimal(allocation.target_quantity) for allocation in request.targets],
        )
        for row, share in enumerate(shares):
            if share == 0:
                errors.append(
                    ConversionIssue(
                        IssueCode.INVALID_QUANTITY,
                        "Target quantity is too small a share of the source quantity to consume any stock",
                        field="target_quantity",
                        row=row,
                        details={"consumed": str(share)},
                    )
                )

    for target_variant_id, rows in rows_by_target.items():
        if len(rows) > 1:
            report.warnings.append(
                ConversionIssue(
                    IssueCode.DUPLICATE_TARGET,
                    f"Target variant {target_variant_id} appears in rows {', '.join(str(r) for r in rows)}; "
                    "consider merging them",
                    field="target_variant_id",
                    row=rows[1],
                    details={"rows": rows},
                )
            )

    return report
