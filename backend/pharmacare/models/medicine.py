"""
Medicine and its on-hand stock.

quantity is only decremented by the sale-invoice transaction (conditional
UPDATE); the CHECK constraint backs the never-negative invariant at the store.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pharmacare.db.base import Base


class Medicine(Base):
    __tablename__ = "medicines"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_medicines_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_medicines_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(String(1024), nullable=True)
    price = Column(Integer, nullable=False)  # smallest currency unit
    quantity = Column(Integer, nullable=False, default=0)
    expiration_date = Column(Date, nullable=True)
    category_id = Column(
        Integer, ForeignKey("medicine_categories.id", ondelete="RESTRICT"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("MedicineCategory", back_populates="medicines")
