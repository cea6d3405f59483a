"""Suppliers: plain CRUD, no references from other tables."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, get_current_employee
from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import BusinessError
from pharmacare.models.employee import Employee
from pharmacare.models.supplier import Supplier
from pharmacare.schemas.common import ok
from pharmacare.schemas.supplier import SupplierCreate, SupplierOut

router = APIRouter()


def _get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise BusinessError.not_found("Supplier not found")
    return supplier


@router.get("")
def list_suppliers(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    suppliers = db.query(Supplier).order_by(Supplier.name.asc()).all()
    return ok([SupplierOut.model_validate(s) for s in suppliers], message="Suppliers retrieved")


@router.get("/{supplier_id}")
def get_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return ok(SupplierOut.model_validate(_get_supplier(db, supplier_id)), message="Supplier retrieved")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_supplier(
    data: SupplierCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    supplier = Supplier(**data.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)

    AuditLog.log_action("create", "supplier", supplier.id, current_employee.id, changes={"name": supplier.name})
    return ok(SupplierOut.model_validate(supplier), message="Supplier created")


@router.put("/{supplier_id}")
def update_supplier(
    supplier_id: int,
    data: SupplierCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    supplier = _get_supplier(db, supplier_id)

    for field, value in data.model_dump().items():
        setattr(supplier, field, value)
    db.commit()
    db.refresh(supplier)

    AuditLog.log_action("update", "supplier", supplier.id, current_employee.id, changes=data.model_dump())
    return ok(SupplierOut.model_validate(supplier), message="Supplier updated")


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    supplier = _get_supplier(db, supplier_id)

    name = supplier.name
    try:
        db.delete(supplier)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.bad_request("Cannot delete supplier: it is in use")

    AuditLog.log_action("delete", "supplier", supplier_id, current_employee.id, changes={"name": name})
    return ok({"id": supplier_id}, message=f"Deleted {name}")
