"""FastAPI dependencies: DB session and current employee from the bearer token."""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pharmacare.db.session import SessionLocal
from pharmacare.core.exceptions import BusinessError
from pharmacare.core.security import decode_access_token
from pharmacare.models.employee import Employee

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_employee_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """Extract employee ID from the JWT in the Authorization header."""
    if not credentials:
        raise BusinessError.unauthorized("Not authenticated", reason="missing bearer token")

    sub = decode_access_token(credentials.credentials)
    if not sub:
        raise BusinessError.unauthorized("Invalid or expired token")

    try:
        return int(sub)
    except ValueError:
        raise BusinessError.unauthorized("Invalid or expired token", reason=f"non-numeric subject {sub!r}")


def get_current_employee(
    db: Session = Depends(get_db),
    employee_id: int = Depends(get_current_employee_id),
) -> Employee:
    """Load current employee from DB."""
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise BusinessError.unauthorized("Employee not found", reason=f"token for deleted employee {employee_id}")
    return employee
