"""
CATALOG TESTS
CRUD for medicine categories, suppliers and medicines, plus the inventory views.
"""
from datetime import date, timedelta

import pytest


# ==============================================================================
# CATEGORIES
# ==============================================================================

def test_category_crud(client, auth_headers):
    created = client.post(
        "/api/medicine-categories",
        json={"name": "Antibiotics", "description": "Bacterial infections"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    category_id = created.json()["data"]["id"]

    fetched = client.get(f"/api/medicine-categories/{category_id}", headers=auth_headers)
    assert fetched.json()["data"] == {"id": category_id, "name": "Antibiotics", "description": "Bacterial infections"}

    updated = client.put(
        f"/api/medicine-categories/{category_id}",
        json={"name": "Antibiotics", "description": "Prescription only"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["description"] == "Prescription only"

    deleted = client.delete(f"/api/medicine-categories/{category_id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/medicine-categories/{category_id}", headers=auth_headers).status_code == 404


def test_categories_listed_by_name(client, auth_headers, make_category):
    for name in ("Vitamins", "Antibiotics", "Cough"):
        make_category(name=name)

    resp = client.get("/api/medicine-categories", headers=auth_headers)

    assert [c["name"] for c in resp.json()["data"]] == ["Antibiotics", "Cough", "Vitamins"]


def test_category_name_must_be_unique(client, auth_headers, make_category):
    make_category(name="Antibiotics")
    other = make_category(name="Vitamins")

    dup = client.post("/api/medicine-categories", json={"name": "Antibiotics"}, headers=auth_headers)
    rename = client.put(f"/api/medicine-categories/{other['id']}", json={"name": "Antibiotics"}, headers=auth_headers)

    assert dup.status_code == 400
    assert dup.json()["message"] == "Category 'Antibiotics' already exists"
    assert rename.status_code == 400


def test_category_name_race_is_400(client, auth_headers, make_category, monkeypatch):
    make_category(name="Antibiotics")
    other = make_category(name="Vitamins")
    # Both requests pass the lookup before either commits
    monkeypatch.setattr("pharmacare.api.routes.medicine_categories._name_taken", lambda db, name: False)

    dup = client.post("/api/medicine-categories", json={"name": "Antibiotics"}, headers=auth_headers)
    rename = client.put(f"/api/medicine-categories/{other['id']}", json={"name": "Antibiotics"}, headers=auth_headers)

    assert dup.status_code == 400
    assert dup.json() == {"success": False, "message": "Category 'Antibiotics' already exists"}
    assert rename.status_code == 400
    listed = client.get("/api/medicine-categories", headers=auth_headers).json()["data"]
    assert [c["name"] for c in listed] == ["Antibiotics", "Vitamins"]


def test_category_name_required(client, auth_headers):
    resp = client.post("/api/medicine-categories", json={"name": "  "}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid input data"


def test_category_in_use_cannot_be_deleted(client, auth_headers, make_medicine):
    medicine = make_medicine()

    resp = client.delete(f"/api/medicine-categories/{medicine['categoryId']}", headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Cannot delete category: it is in use"}


def test_missing_category_is_404(client, auth_headers):
    for method in ("get", "delete"):
        resp = getattr(client, method)("/api/medicine-categories/404", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Medicine category not found"


def test_catalog_requires_authentication(client):
    assert client.get("/api/medicine-categories").status_code == 401
    assert client.get("/api/suppliers").status_code == 401
    assert client.get("/api/medicines").status_code == 401


# ==============================================================================
# SUPPLIERS
# ==============================================================================

SUPPLIER = {
    "name": "DHG Pharma",
    "address": "288 Bis Nguyen Van Cu, Can Tho",
    "phone": "02923891433",
    "email": "dhgpharma@dhgpharma.com.vn",
}


def test_supplier_crud(client, auth_headers):
    created = client.post("/api/suppliers", json=SUPPLIER, headers=auth_headers)
    assert created.status_code == 201
    supplier = created.json()["data"]
    assert supplier["name"] == "DHG Pharma"

    updated = client.put(
        f"/api/suppliers/{supplier['id']}",
        json={**SUPPLIER, "phone": "02923891000", "email": ""},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["phone"] == "02923891000"
    assert updated.json()["data"]["email"] is None

    assert client.delete(f"/api/suppliers/{supplier['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/suppliers/{supplier['id']}", headers=auth_headers).status_code == 404


def test_suppliers_listed_by_name(client, auth_headers):
    for name in ("Traphaco JSC", "DHG Pharma", "GSK Vietnam"):
        client.post("/api/suppliers", json={**SUPPLIER, "name": name}, headers=auth_headers)

    resp = client.get("/api/suppliers", headers=auth_headers)

    assert [s["name"] for s in resp.json()["data"]] == ["DHG Pharma", "GSK Vietnam", "Traphaco JSC"]


@pytest.mark.parametrize("missing", ["name", "address", "phone"])
def test_supplier_required_fields(client, auth_headers, missing):
    payload = {k: v for k, v in SUPPLIER.items() if k != missing}

    resp = client.post("/api/suppliers", json=payload, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid input data"


def test_update_missing_supplier_is_404(client, auth_headers):
    resp = client.put("/api/suppliers/31", json=SUPPLIER, headers=auth_headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Supplier not found"


# ==============================================================================
# MEDICINES
# ==============================================================================

def test_medicine_create_and_get_with_category(client, auth_headers, make_category):
    category = make_category(name="Pain relief")

    created = client.post(
        "/api/medicines",
        json={
            "name": "Panadol Extra",
            "description": "Headache and fever",
            "price": 25000,
            "quantity": 200,
            "expirationDate": "2026-05-10",
            "categoryId": category["id"],
        },
        headers=auth_headers,
    )
    assert created.status_code == 201
    medicine_id = created.json()["data"]["id"]

    data = client.get(f"/api/medicines/{medicine_id}", headers=auth_headers).json()["data"]
    assert data["name"] == "Panadol Extra"
    assert data["price"] == 25000
    assert data["quantity"] == 200
    assert data["expirationDate"] == "2026-05-10"
    assert data["category"]["name"] == "Pain relief"


def test_medicine_with_unknown_category_is_404(client, auth_headers):
    resp = client.post(
        "/api/medicines",
        json={"name": "Orphan", "price": 100, "quantity": 1, "categoryId": 999},
        headers=auth_headers,
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Medicine category not found"


@pytest.mark.parametrize(
    "override",
    [{"price": -1}, {"quantity": -5}, {"name": ""}, {"categoryId": None}],
)
def test_medicine_validation(client, auth_headers, make_category, override):
    category = make_category()
    payload = {"name": "Panadol", "price": 100, "quantity": 1, "categoryId": category["id"], **override}

    resp = client.post("/api/medicines", json=payload, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid input data"


def test_medicine_update_moves_category(client, auth_headers, make_category, make_medicine):
    medicine = make_medicine(name="Berocca", quantity=5)
    vitamins = make_category(name="Vitamins")

    resp = client.put(
        f"/api/medicines/{medicine['id']}",
        json={"name": "Berocca Performance", "price": 150000, "quantity": 90, "categoryId": vitamins["id"]},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Berocca Performance"
    assert data["quantity"] == 90
    assert data["category"]["name"] == "Vitamins"


def test_medicines_listed_by_name(client, auth_headers, make_medicine):
    for name in ("Terpin Codein", "Augmentin 625mg", "Panadol Extra"):
        make_medicine(name=name)

    resp = client.get("/api/medicines", headers=auth_headers)

    assert [m["name"] for m in resp.json()["data"]] == ["Augmentin 625mg", "Panadol Extra", "Terpin Codein"]


def test_sold_medicine_cannot_be_deleted(client, auth_headers, make_medicine, sell):
    medicine = make_medicine(quantity=5)
    assert sell((medicine["id"], 1, 100)).status_code == 201

    resp = client.delete(f"/api/medicines/{medicine['id']}", headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete medicine: it is in use"


def test_unsold_medicine_can_be_deleted(client, auth_headers, make_medicine):
    medicine = make_medicine()

    assert client.delete(f"/api/medicines/{medicine['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/medicines/{medicine['id']}", headers=auth_headers).status_code == 404


# ==============================================================================
# INVENTORY VIEWS
# ==============================================================================

def test_inventory_lowest_stock_first(client, auth_headers, make_medicine):
    make_medicine(name="Plenty", quantity=300)
    make_medicine(name="Scarce", quantity=2)
    make_medicine(name="Some", quantity=40)

    resp = client.get("/api/medicines/inventory/all", headers=auth_headers)

    rows = resp.json()["data"]
    assert [r["name"] for r in rows] == ["Scarce", "Some", "Plenty"]
    assert set(rows[0]["category"]) == {"name"}


def test_low_stock_threshold(client, auth_headers, make_medicine):
    make_medicine(name="Scarce", quantity=2)
    make_medicine(name="Some", quantity=40)

    default = client.get("/api/medicines/inventory/low-stock", headers=auth_headers).json()["data"]
    custom = client.get("/api/medicines/inventory/low-stock", params={"threshold": 50}, headers=auth_headers).json()["data"]

    assert [r["name"] for r in default] == ["Scarce"]
    assert [r["name"] for r in custom] == ["Scarce", "Some"]


def test_expiring_soon(client, auth_headers, make_medicine):
    today = date.today()
    make_medicine(name="Next week", expiration_date=(today + timedelta(days=7)).isoformat())
    make_medicine(name="Tomorrow", expiration_date=(today + timedelta(days=1)).isoformat())
    make_medicine(name="Next year", expiration_date=(today + timedelta(days=365)).isoformat())
    make_medicine(name="Expired", expiration_date=(today - timedelta(days=3)).isoformat())
    make_medicine(name="No date")

    rows = client.get("/api/medicines/inventory/expiring", params={"days": 30}, headers=auth_headers).json()["data"]

    assert [(r["name"], r["daysUntilExpiry"]) for r in rows] == [("Tomorrow", 1), ("Next week", 7)]
