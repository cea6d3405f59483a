"""
Shared fixtures: isolated in-memory database per test, API client, and
helpers that register employees and create catalog rows through the API.
"""
import os
import tempfile

# Must be set before pharmacare.core.config is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALLOWED_HOSTS"] = "testserver,localhost,127.0.0.1"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pharmacare-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmacare.api.deps import get_db
from pharmacare.core.rate_limiter import rate_limiter
from pharmacare.db.init_db import init_db
from pharmacare.main import app
from pharmacare.models.sale_invoice import SaleInvoice


@pytest.fixture
def engine():
    """
    Fresh in-memory SQLite database for each test.
    StaticPool keeps the single connection alive across sessions.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register an employee; returns (employee_id, auth headers)."""
    counter = {"n": 0}

    def _register(username=None, password="secret123", **overrides):
        counter["n"] += 1
        n = counter["n"]
        username = username or f"employee{n}"
        payload = {
            "fullName": f"Employee {n}",
            "birthDate": "1990-01-15",
            "address": f"{n} Tran Hung Dao, District 1",
            "phone": f"09031234{n:02d}",
            "email": f"{username}@pharmacare.vn",
            "username": username,
            "password": password,
        }
        payload.update(overrides)
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        return data["userId"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    _, headers = register(username="annguyen")
    return headers


@pytest.fixture
def make_category(client, auth_headers):
    counter = {"n": 0}

    def _make(name=None, description=None):
        counter["n"] += 1
        resp = client.post(
            "/api/medicine-categories",
            json={"name": name or f"Category {counter['n']}", "description": description},
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make


@pytest.fixture
def make_medicine(client, auth_headers, make_category):
    """Create a medicine (in a new category unless one is given)."""
    counter = {"n": 0}

    def _make(name=None, quantity=10, price=1000, category_id=None, expiration_date=None):
        counter["n"] += 1
        if category_id is None:
            category_id = make_category()["id"]
        resp = client.post(
            "/api/medicines",
            json={
                "name": name or f"Medicine {counter['n']}",
                "price": price,
                "quantity": quantity,
                "categoryId": category_id,
                "expirationDate": expiration_date,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make


@pytest.fixture
def sell(client, auth_headers):
    """POST a sale; items are (medicine_id, quantity, unit_price) tuples."""

    def _sell(*items, headers=None):
        body = {
            "items": [
                {"medicineId": medicine_id, "quantity": quantity, "unitPrice": unit_price}
                for medicine_id, quantity, unit_price in items
            ]
        }
        return client.post("/api/sale-invoices", json=body, headers=headers or auth_headers)

    return _sell


@pytest.fixture
def stock_of(client, auth_headers):
    def _stock(medicine_id):
        resp = client.get(f"/api/medicines/{medicine_id}", headers=auth_headers)
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]["quantity"]

    return _stock


@pytest.fixture
def backdate(session_factory):
    """Move an invoice to a fixed timestamp, bypassing the API."""

    def _backdate(invoice_id, when):
        db = session_factory()
        try:
            db.query(SaleInvoice).filter(SaleInvoice.id == invoice_id).update(
                {SaleInvoice.invoice_date: when}, synchronize_session=False
            )
            db.commit()
        finally:
            db.close()

    return _backdate
