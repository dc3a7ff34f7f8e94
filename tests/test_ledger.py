from decimal import Decimal

import pytest

from stockconv.models.inventory import MAX_QUANTITY
from stockconv.services.errors import InsufficientStockError, StaleVersionError, UnknownVariantError
from stockconv.services.ledger import StockLedger


def test_get_quantity_returns_closing_qty_and_version(db, catalog):
    qty, version = StockLedger(db).get_quantity(catalog["depot"], catalog["A"])

    assert qty == Decimal("100")
    assert version == 1


def test_get_quantity_rejects_variant_from_other_depot(db, catalog):
    with pytest.raises(UnknownVariantError):
        StockLedger(db).get_quantity(catalog["depot"], catalog["FAR"])


def test_apply_delta_updates_quantity_and_bumps_version(db, catalog, qty):
    ledger = StockLedger(db)

    new_version = ledger.apply_delta(catalog["depot"], catalog["A"], Decimal("-12.5"), expected_version=1)
    db.commit()

    assert new_version == 2
    assert qty(catalog["A"]) == Decimal("87.5")
    assert ledger.get_quantity(catalog["depot"], catalog["A"]) == (Decimal("87.5"), 2)


def test_apply_delta_with_stale_version_fails(db, catalog, qty):
    ledger = StockLedger(db)
    ledger.apply_delta(catalog["depot"], catalog["B"], Decimal("1"), expected_version=1)
    db.commit()

    with pytest.raises(StaleVersionError):
        ledger.apply_delta(catalog["depot"], catalog["B"], Decimal("1"), expected_version=1)
    db.rollback()

    assert qty(catalog["B"]) == Decimal("6")


def test_apply_delta_never_goes_negative(db, catalog, qty):
    ledger = StockLedger(db)

    with pytest.raises(InsufficientStockError) as excinfo:
        ledger.apply_delta(catalog["depot"], catalog["B"], Decimal("-5.0001"), expected_version=1)
    db.rollback()

    assert excinfo.value.available == Decimal("5")
    assert qty(catalog["B"]) == Decimal("5")
    assert ledger.get_quantity(catalog["depot"], catalog["B"])[1] == 1


def test_apply_delta_can_drain_to_zero(db, catalog, qty):
    StockLedger(db).apply_delta(catalog["depot"], catalog["B"], Decimal("-5"), expected_version=1)
    db.commit()

    assert qty(catalog["B"]) == Decimal("0")


def test_snapshot_reads_every_requested_variant(db, catalog):
    snapshot = StockLedger(db).snapshot([catalog["A"], catalog["FAR"], 99999])

    assert set(snapshot) == {catalog["A"], catalog["FAR"]}
    assert snapshot[catalog["FAR"]].depot_id == catalog["other_depot"]
    assert snapshot[catalog["A"]].closing_qty == Decimal("100")


def test_apply_delta_rejects_sub_step_delta_instead_of_rounding(db, catalog, qty):
    ledger = StockLedger(db)

    with pytest.raises(ValueError):
        ledger.apply_delta(catalog["depot"], catalog["B"], Decimal("-1.00005"), expected_version=1)
    db.rollback()

    assert qty(catalog["B"]) == Decimal("5")
    assert ledger.get_quantity(catalog["depot"], catalog["B"]) == (Decimal("5"), 1)


def test_apply_delta_refuses_to_exceed_column_capacity(db, catalog, qty):
    ledger = StockLedger(db)

    with pytest.raises(ValueError):
        ledger.apply_delta(catalog["depot"], catalog["A"], MAX_QUANTITY, expected_version=1)
    db.rollback()

    assert qty(catalog["A"]) == Decimal("100")
