from typing import Optional

from pydantic import field_validator

from pharmacare.schemas.common import CamelModel, require_text


class CategoryCreate(CamelModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return require_text(v, "Category name")


class CategoryOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
