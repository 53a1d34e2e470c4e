from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import datetime as dt  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from contapyme.core.config import settings  # noqa: E402
from contapyme.core.security import create_access_token  # noqa: E402
from contapyme.db import session as db_session_module  # noqa: E402
from contapyme.db.base_class import Base  # noqa: E402
from contapyme.db.session import SessionLocal  # noqa: E402
from contapyme.models.inventory_models import Product  # noqa: E402
from contapyme.models.models import Business, User  # noqa: E402
from contapyme.models.payroll_models import Worker  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state(tmp_path, monkeypatch):
    """Each test sees a fresh schema and writes its own audit log."""
    monkeypatch.setattr(settings, "AUDIT_LOG_FILE", str(tmp_path / "audit.log"))
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_business(db, user_id: int, email: str, tax_id: str) -> Business:
    user = User(id=user_id, email=email, name="Owner")
    business = Business(user=user, name=f"Comercial {user_id}", tax_id=tax_id, giro="Retail")
    db.add_all([user, business])
    db.commit()
    return business


@pytest.fixture
def business(db_session) -> Business:
    return _make_business(db_session, 1, "owner@example.cl", "76086428-5")


@pytest.fixture
def other_business(db_session) -> Business:
    return _make_business(db_session, 2, "other@example.cl", "11111111-1")


@pytest.fixture
def make_product(db_session, business):
    """Factory for products owned by ``business`` unless ``owner`` is given."""
    def _make(name="Cafe 250g", stock=10, minimum=2, sale_price=1190, purchase_price=500, owner=None, **kw):
        product = Product(
            business_id=(owner or business).id,
            name=name,
            current_stock=stock,
            minimum_stock=minimum,
            sale_price=sale_price,
            purchase_price=purchase_price,
            **kw,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture
def make_worker(db_session, business):
    def _make(tax_id="12345678-5", base_salary=1_000_000, private_insurer=None, owner=None, **kw):
        worker = Worker(
            business_id=(owner or business).id,
            tax_id=tax_id,
            first_name=kw.pop("first_name", "Ana"),
            paternal_surname=kw.pop("paternal_surname", "Rojas"),
            maternal_surname=kw.pop("maternal_surname", "Soto"),
            start_date=dt.date(2024, 1, 1),
            base_salary=base_salary,
            pension_fund="Modelo",
            private_health_insurer=private_insurer,
            **kw,
        )
        db_session.add(worker)
        db_session.commit()
        return worker

    return _make


@pytest.fixture
def client():
    from contapyme.api.main import app

    return TestClient(app)


@pytest.fixture
def auth_headers(business) -> dict[str, str]:
    token = create_access_token(str(business.user_id))
    return {"Authorization": f"Bearer {token}"}
