from decimal import ROUND_DOWN, Decimal
from typing import Sequence

from stockconv.models.inventory import QUANTITY_STEP


def apportion(source_quantity: Decimal, target_quantities: Sequence[Decimal]) -> list[Decimal]:
    """Split ``source_quantity`` across target rows in proportion to their target quantity.

    Every row but the last is rounded down to the ledger scale; the last row takes the
    remainder, so the shares always add up to ``source_quantity`` exactly.
    """
    if not target_quantities:
        raise ValueError("At least one target quantity is required")
    total = sum(target_quantities, Decimal("0"))
    if total <= 0 or any(quantity <= 0 for quantity in target_quantities):
        raise ValueError("Target quantities must be greater than 0")

    shares: list[Decimal] = []
    allocated = Decimal("0")
    for quantity in target_quantities[:-1]:
        share = (source_quantity * quantity / total).quantize(QUANTITY_STEP, rounding=ROUND_DOWN)
        shares.append(share)
        allocated += share
    shares.append(source_quantity - allocated)
    return shares
