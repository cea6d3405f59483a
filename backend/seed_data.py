"""Seed a fresh database with demo employees, categories, medicines and suppliers.

Usage (from backend/):
    python seed_data.py

Both demo employees log in with password123.
"""
from datetime import date

from pharmacare.core.logging_config import configure_logging
from pharmacare.core.security import get_password_hash
from pharmacare.db.init_db import init_db
from pharmacare.db.session import SessionLocal
from pharmacare.models import Employee, Medicine, MedicineCategory, Supplier

EMPLOYEES = [
    {
        "full_name": "Nguyen Van An",
        "birth_date": date(1985, 6, 15),
        "address": "10 Tran Hung Dao, District 1, Ho Chi Minh City",
        "phone": "0903123456",
        "email": "nguyen.van.an@example.com",
        "username": "annguyen",
    },
    {
        "full_name": "Tran Thi Bich",
        "birth_date": date(1992, 11, 20),
        "address": "25 Hue Street, Hai Ba Trung, Hanoi",
        "phone": "0912987654",
        "email": "tran.thi.bich@example.com",
        "username": "bichtran",
    },
]

# category name -> (description, [(name, description, price, quantity, expiration_date)])
CATALOG = {
    "Pain relief and fever": (
        "Common pain relievers and fever reducers.",
        [("Panadol Extra", "Headache, migraine, toothache, period pain. Reduces fever.",
          25000, 200, date(2026, 5, 10))],
    ),
    "Antibiotics": (
        "Medicines for bacterial infections.",
        [("Augmentin 625mg", "Respiratory, urinary tract, skin and soft tissue infections.",
          180000, 75, date(2025, 8, 22))],
    ),
    "Cough and expectorants": (
        "Cough suppressants and mucus thinners.",
        [("Terpin Codein", "Dry and irritative cough.", 45000, 120, date(2025, 11, 15))],
    ),
    "Vitamins and minerals": (
        "Essential vitamin and mineral supplements.",
        [("Berocca Performance", "Vitamin B complex, vitamin C, calcium, magnesium and zinc.",
          150000, 90, date(2026, 1, 30))],
    ),
}

SUPPLIERS = [
    {
        "name": "DHG Pharma",
        "address": "288 Bis Nguyen Van Cu, An Hoa, Ninh Kieu, Can Tho",
        "phone": "02923891433",
        "email": "dhgpharma@dhgpharma.com.vn",
    },
    {
        "name": "Traphaco JSC",
        "address": "75 Yen Ninh, Truc Bach, Ba Dinh, Hanoi",
        "phone": "02437676522",
        "email": "info@traphaco.com.vn",
    },
    {
        "name": "GlaxoSmithKline (GSK) Vietnam",
        "address": "CentrePoint, 106 Nguyen Van Troi, Phu Nhuan, Ho Chi Minh City",
        "phone": "02838453100",
        "email": None,
    },
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Employee).first():
            print("Database already has data, skipping seed.")
            return

        password_hash = get_password_hash("password123")
        for data in EMPLOYEES:
            db.add(Employee(password_hash=password_hash, **data))

        for category_name, (category_description, medicines) in CATALOG.items():
            category = MedicineCategory(name=category_name, description=category_description)
            db.add(category)
            db.flush()
            for name, description, price, quantity, expiration_date in medicines:
                db.add(Medicine(
                    name=name,
                    description=description,
                    price=price,
                    quantity=quantity,
                    expiration_date=expiration_date,
                    category_id=category.id,
                ))

        for data in SUPPLIERS:
            db.add(Supplier(**data))

        db.commit()
        print(f"Seeded {len(EMPLOYEES)} employees, {len(CATALOG)} categories and {len(SUPPLIERS)} suppliers.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
