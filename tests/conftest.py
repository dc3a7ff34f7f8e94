import os
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

# The engine is built at import time, so the database must be chosen first.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="stockconv-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'test.db'}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")

from fastapi.testclient import TestClient  # noqa: E402

from stockconv.core.security import create_access_token  # noqa: E402
from stockconv.db.database import Base, SessionLocal, engine  # noqa: E402
from stockconv.main import app  # noqa: E402
from stockconv.models.inventory import Depot, DepotVariant, Product  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db):
    """Depot D with milk variants A (bulk, 100 on hand), B and C, plus a curd variant."""
    depot = Depot(code="D1", name="Central Depot")
    other_depot = Depot(code="D2", name="North Depot")
    milk = Product(name="Cow Milk", unit="litre")
    curd = Product(name="Curd", unit="g")
    db.add_all([depot, other_depot, milk, curd])
    db.flush()

    variants = {
        "A": DepotVariant(depot_id=depot.id, product_id=milk.id, name="Milk 10L can", closing_qty=Decimal("100")),
        "B": DepotVariant(depot_id=depot.id, product_id=milk.id, name="Milk 1L pouch", closing_qty=Decimal("5")),
        "C": DepotVariant(depot_id=depot.id, product_id=milk.id, name="Milk 500ml pouch", closing_qty=Decimal("0")),
        "CURD": DepotVariant(depot_id=depot.id, product_id=curd.id, name="Curd 400g cup", closing_qty=Decimal("20")),
        "FAR": DepotVariant(depot_id=other_depot.id, product_id=milk.id, name="Milk 1L pouch", closing_qty=Decimal("9")),
    }
    db.add_all(variants.values())
    db.commit()
    ids = {key: variant.id for key, variant in variants.items()}
    ids["depot"] = depot.id
    ids["other_depot"] = other_depot.id
    ids["product"] = milk.id
    return ids


@pytest.fixture
def qty():
    def _closing_qty(variant_id: int) -> Decimal:
        session = SessionLocal()
        try:
            return Decimal(session.get(DepotVariant, variant_id).closing_qty)
        finally:
            session.close()

    return _closing_qty


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    def _headers(role: str = "admin", username: str = "ops@depot", depot_id: int | None = None) -> dict[str, str]:
        token = create_access_token(subject=username, role=role, depot_id=depot_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
