from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import update

from stockconv.models.conversion import ConversionRecord
from stockconv.models.inventory import DepotVariant
from stockconv.services.history import ConversionHistory
from stockconv.services.suggestions import suggest


def _record(catalog, target, consumed, produced, performed_at, name=None):
    return ConversionRecord(
        batch_id=f"batch-{performed_at:%H%M%S}",
        depot_id=catalog["depot"],
        product_id=catalog["product"],
        source_variant_id=catalog["A"],
        source_variant_name="Milk 10L can",
        source_quantity_consumed=Decimal(consumed),
        target_variant_id=catalog[target],
        target_variant_name=name or target,
        target_quantity_produced=Decimal(produced),
        performed_by="ops",
        performed_at=performed_at,
    )


def _seed(db, records):
    ConversionHistory(db).append(records)
    db.commit()


def test_no_history_gives_no_suggestions(db, catalog):
    assert suggest(db, catalog["A"]) == []


def test_ratio_is_quantity_weighted(db, catalog):
    now = datetime(2026, 10, 1, 9, 0, 0)
    _seed(
        db,
        [
            _record(catalog, "B", "10", "5", now),
            _record(catalog, "B", "100", "40", now + timedelta(seconds=1)),
        ],
    )

    [suggestion] = suggest(db, catalog["A"])

    assert suggestion.target_variant_id == catalog["B"]
    assert suggestion.sample_count == 2
    assert abs(suggestion.suggested_ratio - Decimal(45) / Decimal(110)) < Decimal("0.000001")
    assert suggestion.suggested_ratio != Decimal("0.45")
    assert "Milk 10L can" in suggestion.description
    assert "0.4091" in suggestion.description


def test_groups_sorted_by_sample_count_and_capped(db, catalog):
    now = datetime(2026, 10, 1, 9, 0, 0)
    _seed(
        db,
        [
            _record(catalog, "C", "1", "2", now),
            _record(catalog, "B", "1", "10", now + timedelta(seconds=1)),
            _record(catalog, "B", "1", "10", now + timedelta(seconds=2)),
        ],
    )

    suggestions = suggest(db, catalog["A"])
    assert [s.target_variant_id for s in suggestions] == [catalog["B"], catalog["C"]]
    assert suggestions[0].suggested_ratio == Decimal("10")

    assert [s.target_variant_id for s in suggest(db, catalog["A"], limit=1)] == [catalog["B"]]


def test_suggestion_uses_current_variant_name(db, catalog):
    _seed(db, [_record(catalog, "C", "1", "2", datetime(2026, 10, 1), name="Old pouch name")])
    db.execute(update(DepotVariant).where(DepotVariant.id == catalog["C"]).values(name="Milk 500ml pouch v2"))
    db.commit()

    [suggestion] = suggest(db, catalog["A"])
    assert suggestion.target_variant_name == "Milk 500ml pouch v2"


def test_zero_limit_returns_nothing(db, catalog):
    _seed(db, [_record(catalog, "B", "1", "10", datetime(2026, 10, 1))])

    assert suggest(db, catalog["A"], limit=0) == []
    assert len(suggest(db, catalog["A"], limit=None)) == 1
