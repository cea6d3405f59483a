"""Auth: register, login and the employee's own profile.

SECURITY:
- Passwords hashed with bcrypt, never logged
- Same 401 message for unknown username and wrong password
- Every outcome written to the audit log
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, get_current_employee, get_current_employee_id
from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings
from pharmacare.core.exceptions import BusinessError
from pharmacare.core.security import verify_password, get_password_hash, create_access_token
from pharmacare.models.employee import Employee
from pharmacare.schemas.common import ok
from pharmacare.schemas.employee import (
    RegisterRequest,
    LoginRequest,
    AuthData,
    EmployeeProfile,
    ProfileUpdate,
    ChangePasswordRequest,
    AvatarUpload,
    AvatarData,
)
from pharmacare.services.file_service import InvalidAvatarError, save_avatar


router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _check_password_length(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise BusinessError.bad_request(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )


def _taken(db: Session, column, value, exclude_id: int = None) -> bool:
    q = db.query(Employee).filter(column == value)
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    return q.first() is not None


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Create an employee account and return a token for it."""
    _check_password_length(data.password)

    if _taken(db, Employee.username, data.username):
        AuditLog.log_authentication("register", data.username, _client_ip(request), False, reason="username taken")
        raise BusinessError.bad_request("Username already exists")
    if _taken(db, Employee.email, data.email):
        raise BusinessError.bad_request("Email already registered")
    if _taken(db, Employee.phone, data.phone):
        raise BusinessError.bad_request("Phone number already registered")

    employee = Employee(
        username=data.username,
        password_hash=get_password_hash(data.password),
        full_name=data.full_name,
        birth_date=data.birth_date,
        address=data.address,
        phone=data.phone,
        email=data.email,
    )
    try:
        db.add(employee)
        db.commit()
    except IntegrityError:
        # A concurrent registration claimed one of the unique fields first
        db.rollback()
        AuditLog.log_authentication("register", data.username, _client_ip(request), False, reason="duplicate identity")
        raise BusinessError.bad_request("Username, email or phone number already registered")
    db.refresh(employee)

    AuditLog.log_authentication("register", employee.username, _client_ip(request), True)
    token = create_access_token(subject=employee.id, username=employee.username)
    return ok(
        AuthData(user_id=employee.id, username=employee.username, token=token),
        message="Registration successful",
    )


@router.post("/login")
def login(data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    employee = db.query(Employee).filter(Employee.username == data.username).first()
    if not employee or not verify_password(data.password, employee.password_hash):
        AuditLog.log_authentication(
            "failed_login", data.username, _client_ip(request), False,
            reason="unknown user" if not employee else "invalid password",
        )
        raise BusinessError.unauthorized("Invalid username or password", reason=f"login as {data.username}")

    AuditLog.log_authentication("login", employee.username, _client_ip(request), True)
    token = create_access_token(subject=employee.id, username=employee.username)
    return ok(
        AuthData(user_id=employee.id, username=employee.username, token=token),
        message="Login successful",
    )


@router.get("/me")
def me(current_employee: Employee = Depends(get_current_employee)):
    """Get current authenticated employee."""
    return ok(EmployeeProfile.model_validate(current_employee), message="Profile retrieved")


@router.put("/profile")
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    employee_id: int = Depends(get_current_employee_id),
):
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise BusinessError.not_found("Employee not found")

    # Uniqueness only matters when the value actually changes
    if data.email is not None and data.email != employee.email:
        if _taken(db, Employee.email, data.email, exclude_id=employee.id):
            raise BusinessError.bad_request("Email already registered")
    if data.phone is not None and data.phone != employee.phone:
        if _taken(db, Employee.phone, data.phone, exclude_id=employee.id):
            raise BusinessError.bad_request("Phone number already registered")

    changes = data.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(employee, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.bad_request("Email or phone number already registered")
    db.refresh(employee)

    AuditLog.log_action("update", "employee", employee.id, employee.id, changes={"fields": sorted(changes)})
    return ok(EmployeeProfile.model_validate(employee), message="Profile updated")


@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    if not verify_password(data.current_password, current_employee.password_hash):
        AuditLog.log_security_event("password_change_failed", current_employee.id, "wrong current password")
        raise BusinessError.bad_request("Current password is incorrect")
    _check_password_length(data.new_password)

    current_employee.password_hash = get_password_hash(data.new_password)
    db.commit()

    AuditLog.log_security_event("password_changed", current_employee.id)
    return ok(message="Password changed successfully")


@router.post("/avatar")
def update_avatar(
    data: AvatarUpload,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    try:
        avatar_url = save_avatar(current_employee.id, data.avatar_base64, previous=current_employee.avatar)
    except InvalidAvatarError as e:
        raise BusinessError.bad_request(str(e))

    current_employee.avatar = avatar_url
    db.commit()

    AuditLog.log_security_event("avatar_updated", current_employee.id, avatar_url)
    return ok(AvatarData(avatar_url=avatar_url), message="Avatar updated")
