from decimal import Decimal

from sqlalchemy.orm import Session

from stockconv.core.config import settings
from stockconv.services.catalog import variant_names
from stockconv.services.history import ConversionHistory
from stockconv.services.types import ConversionSuggestion

RATIO_STEP = Decimal("0.000001")


def _format_ratio(ratio: Decimal) -> str:
    text = f"{ratio.quantize(Decimal('0.0001')):f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def suggest(db: Session, source_variant_id: int, limit: int | None = None) -> list[ConversionSuggestion]:
    """Suggest targets for a source variant from its past conversions.

    The ratio is quantity weighted: total produced over total consumed for each target,
    so large historical conversions count for more than small ones.
    """
    if limit is None:
        limit = settings.suggestion_limit
    records = ConversionHistory(db).for_source(source_variant_id)
    if not records:
        return []

    groups: dict[int, dict] = {}
    for record in records:
        group = groups.setdefault(
            record.target_variant_id,
            {"produced": Decimal("0"), "consumed": Decimal("0"), "count": 0, "name": record.target_variant_name},
        )
        group["produced"] += Decimal(record.target_quantity_produced)
        group["consumed"] += Decimal(record.source_quantity_consumed)
        group["count"] += 1
        # Records are oldest first, so this ends on the latest denormalized name.
        group["name"] = record.target_variant_name

    current_names = variant_names(db, [source_variant_id, *groups])
    source_name = current_names.get(source_variant_id, records[-1].source_variant_name)

    suggestions = []
    for target_variant_id, group in groups.items():
        if group["consumed"] <= 0:
            continue
        ratio = (group["produced"] / group["consumed"]).quantize(RATIO_STEP)
        target_name = current_names.get(target_variant_id, group["name"])
        count = group["count"]
        suggestions.append(
            ConversionSuggestion(
                target_variant_id=target_variant_id,
                target_variant_name=target_name,
                suggested_ratio=ratio,
                description=(
                    f"1 {source_name} ≈ {_format_ratio(ratio)} {target_name} "
                    f"(from {count} conversion{'s' if count != 1 else ''})"
                ),
                sample_count=count,
            )
        )

    suggestions.sort(key=lambda item: (-item.sample_count, item.target_variant_id))
    return suggestions[:limit]
