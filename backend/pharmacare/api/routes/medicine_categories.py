"""Medicine categories: CRUD with name uniqueness."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, get_current_employee
from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import BusinessError
from pharmacare.models.employee import Employee
from pharmacare.models.medicine import Medicine
from pharmacare.models.medicine_category import MedicineCategory
from pharmacare.schemas.common import ok
from pharmacare.schemas.medicine_category import CategoryCreate, CategoryOut

router = APIRouter()


def _get_category(db: Session, category_id: int) -> MedicineCategory:
    category = db.query(MedicineCategory).filter(MedicineCategory.id == category_id).first()
    if not category:
        raise BusinessError.not_found("Medicine category not found")
    return category


def _name_taken(db: Session, name: str) -> bool:
    return db.query(MedicineCategory).filter(MedicineCategory.name == name).first() is not None


@router.get("")
def list_categories(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    categories = db.query(MedicineCategory).order_by(MedicineCategory.name.asc()).all()
    return ok([CategoryOut.model_validate(c) for c in categories], message="Categories retrieved")


@router.get("/{category_id}")
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return ok(CategoryOut.model_validate(_get_category(db, category_id)), message="Category retrieved")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    if _name_taken(db, data.name):
        raise BusinessError.bad_request(f"Category '{data.name}' already exists")

    category = MedicineCategory(name=data.name, description=data.description)
    try:
        db.add(category)
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent request for the same name
        db.rollback()
        raise BusinessError.bad_request(f"Category '{data.name}' already exists")
    db.refresh(category)

    AuditLog.log_action("create", "medicine_category", category.id, current_employee.id, changes={"name": category.name})
    return ok(CategoryOut.model_validate(category), message="Category created")


@router.put("/{category_id}")
def update_category(
    category_id: int,
    data: CategoryCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    category = _get_category(db, category_id)

    if data.name != category.name and _name_taken(db, data.name):
        raise BusinessError.bad_request(f"Category '{data.name}' already exists")

    category.name = data.name
    category.description = data.description
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.bad_request(f"Category '{data.name}' already exists")
    db.refresh(category)

    AuditLog.log_action("update", "medicine_category", category.id, current_employee.id, changes=data.model_dump())
    return ok(CategoryOut.model_validate(category), message="Category updated")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    category = _get_category(db, category_id)

    if db.query(Medicine).filter(Medicine.category_id == category.id).first():
        raise BusinessError.bad_request("Cannot delete category: it is in use")

    name = category.name
    try:
        db.delete(category)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.bad_request("Cannot delete category: it is in use")

    AuditLog.log_action("delete", "medicine_category", category_id, current_employee.id, changes={"name": name})
    return ok({"id": category_id}, message=f"Deleted {name}")
