from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from pharmacare.schemas.common import CamelModel, require_text
from pharmacare.schemas.medicine_category import CategoryOut


class MedicineCreate(CamelModel):
    name: str
    description: Optional[str] = None
    price: int = Field(ge=0)
    quantity: int = Field(ge=0)
    expiration_date: Optional[date] = None
    category_id: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return require_text(v, "Medicine name")

    @field_validator("description")
    @classmethod
    def empty_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v if v and v.strip() else None


class MedicineOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: int
    quantity: int
    expiration_date: Optional[date] = None
    category_id: int


class MedicineWithCategory(MedicineOut):
    category: CategoryOut


class CategoryName(CamelModel):
    name: str


class InventoryRow(CamelModel):
    id: int
    name: str
    quantity: int
    price: int
    expiration_date: Optional[date] = None
    category: CategoryName


class ExpiringRow(InventoryRow):
    days_until_expiry: int
