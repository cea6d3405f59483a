from typing import Optional

from pydantic import field_validator

from pharmacare.schemas.common import CamelModel, require_text


class SupplierCreate(CamelModel):
    name: str
    address: str
    phone: str
    email: Optional[str] = None

    @field_validator("name", "address", "phone")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        return require_text(v, info.field_name)

    @field_validator("email")
    @classmethod
    def empty_email_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v and v.strip() else None


class SupplierOut(CamelModel):
    id: int
    name: str
    address: str
    phone: str
    email: Optional[str] = None
