from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from pharmacare.db.base import Base


class MedicineCategory(Base):
    __tablename__ = "medicine_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(1024), nullable=True)

    # Deleting a category in use must fail at the FK, never re-parent medicines
    medicines = relationship("Medicine", back_populates="category", passive_deletes="all")
