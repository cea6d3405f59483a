"""Medicines: CRUD plus inventory views (stock levels, low stock, expiry alerts)."""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from pharmacare.api.deps import get_db, get_current_employee
from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings
from pharmacare.core.exceptions import BusinessError
from pharmacare.models.employee import Employee
from pharmacare.models.medicine import Medicine
from pharmacare.models.medicine_category import MedicineCategory
from pharmacare.models.sale_invoice import SaleInvoiceDetail
from pharmacare.schemas.common import ok
from pharmacare.schemas.medicine import MedicineCreate, MedicineWithCategory, InventoryRow, ExpiringRow

router = APIRouter()


def _get_medicine(db: Session, medicine_id: int) -> Medicine:
    medicine = (
        db.query(Medicine)
        .options(joinedload(Medicine.category))
        .filter(Medicine.id == medicine_id)
        .first()
    )
    if not medicine:
        raise BusinessError.not_found("Medicine not found")
    return medicine


def _require_category(db: Session, category_id: int) -> None:
    if not db.query(MedicineCategory).filter(MedicineCategory.id == category_id).first():
        raise BusinessError.not_found("Medicine category not found")


# ==============================================================================
# INVENTORY VIEWS
# ==============================================================================

@router.get("/inventory/all")
def inventory_overview(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    """Every medicine with its stock, lowest stock first."""
    medicines = (
        db.query(Medicine)
        .options(joinedload(Medicine.category))
        .order_by(Medicine.quantity.asc(), Medicine.name.asc())
        .all()
    )
    return ok([InventoryRow.model_validate(m) for m in medicines], message="Inventory retrieved")


@router.get("/inventory/low-stock")
def low_stock(
    threshold: Optional[int] = Query(None, ge=0, description="Stock threshold for low stock alert"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD

    medicines = (
        db.query(Medicine)
        .options(joinedload(Medicine.category))
        .filter(Medicine.quantity < threshold)
        .order_by(Medicine.quantity.asc(), Medicine.name.asc())
        .all()
    )
    return ok([InventoryRow.model_validate(m) for m in medicines], message="Low stock medicines retrieved")


@router.get("/inventory/expiring")
def expiring_soon(
    days: int = Query(30, ge=0, description="Alert for medicines expiring within N days"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    today = date.today()
    alert_date = today + timedelta(days=days)

    medicines = (
        db.query(Medicine)
        .options(joinedload(Medicine.category))
        .filter(
            Medicine.expiration_date.isnot(None),
            Medicine.expiration_date >= today,
            Medicine.expiration_date <= alert_date,
        )
        .order_by(Medicine.expiration_date.asc(), Medicine.name.asc())
        .all()
    )
    rows = [
        ExpiringRow(
            **InventoryRow.model_validate(m).model_dump(),
            days_until_expiry=(m.expiration_date - today).days,
        )
        for m in medicines
    ]
    return ok(rows, message="Expiring medicines retrieved")


# ==============================================================================
# CRUD
# ==============================================================================

@router.get("")
def list_medicines(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    medicines = (
        db.query(Medicine)
        .options(joinedload(Medicine.category))
        .order_by(Medicine.name.asc())
        .all()
    )
    return ok([MedicineWithCategory.model_validate(m) for m in medicines], message="Medicines retrieved")


@router.get("/{medicine_id}")
def get_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return ok(MedicineWithCategory.model_validate(_get_medicine(db, medicine_id)), message="Medicine retrieved")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_medicine(
    data: MedicineCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    """Add a medicine. Initial stock comes from `quantity`."""
    _require_category(db, data.category_id)

    medicine = Medicine(**data.model_dump())
    db.add(medicine)
    db.commit()

    medicine = _get_medicine(db, medicine.id)
    AuditLog.log_action(
        "create", "medicine", medicine.id, current_employee.id,
        changes={"name": medicine.name, "quantity": medicine.quantity, "price": medicine.price},
    )
    return ok(MedicineWithCategory.model_validate(medicine), message="Medicine created")


@router.put("/{medicine_id}")
def update_medicine(
    medicine_id: int,
    data: MedicineCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    medicine = _get_medicine(db, medicine_id)
    if data.category_id != medicine.category_id:
        _require_category(db, data.category_id)

    for field, value in data.model_dump().items():
        setattr(medicine, field, value)
    db.commit()

    medicine = _get_medicine(db, medicine_id)
    AuditLog.log_action("update", "medicine", medicine.id, current_employee.id, changes=data.model_dump())
    return ok(MedicineWithCategory.model_validate(medicine), message="Medicine updated")


@router.delete("/{medicine_id}")
def delete_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    medicine = _get_medicine(db, medicine_id)

    # Sold medicines stay, invoices must keep resolving their lines
    if db.query(SaleInvoiceDetail).filter(SaleInvoiceDetail.medicine_id == medicine.id).first():
        raise BusinessError.bad_request("Cannot delete medicine: it is in use")

    name = medicine.name
    try:
        db.delete(medicine)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.bad_request("Cannot delete medicine: it is in use")

    AuditLog.log_action("delete", "medicine", medicine_id, current_employee.id, changes={"name": name})
    return ok({"id": medicine_id}, message=f"Deleted {name}")
