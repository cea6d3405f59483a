from sqlalchemy import Column, Integer, String, Date, DateTime
from sqlalchemy.sql import func
from pharmacare.db.base import Base


class Employee(Base):
    """Pharmacy staff member. Every sale invoice records the employee who made it."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    birth_date = Column(Date, nullable=False)
    address = Column(String(512), nullable=False)
    phone = Column(String(32), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    avatar = Column(String(512), nullable=True)  # public path under /files
    role = Column(String(32), nullable=False, default="EMPLOYEE")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Employee id={self.id} username={self.username}>"
