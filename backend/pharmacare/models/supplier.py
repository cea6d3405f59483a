from sqlalchemy import Column, Integer, String
from pharmacare.db.base import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255), nullable=True)
