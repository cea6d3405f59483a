from datetime import date
from typing import Optional

from pydantic import EmailStr, field_validator

from pharmacare.schemas.common import CamelModel, require_text


class RegisterRequest(CamelModel):
    full_name: str
    birth_date: date
    address: str
    phone: str
    email: EmailStr
    username: str
    password: str

    @field_validator("full_name", "address", "phone", "username")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        return require_text(v, info.field_name)


class LoginRequest(CamelModel):
    username: str
    password: str


class AuthData(CamelModel):
    user_id: int
    username: str
    token: str


class EmployeeProfile(CamelModel):
    id: int
    username: str
    full_name: str
    birth_date: date
    address: str
    phone: str
    email: str
    avatar: Optional[str] = None
    role: str


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("full_name", "address", "phone")
    @classmethod
    def not_blank(cls, v: Optional[str], info) -> Optional[str]:
        if v is None:
            return v
        return require_text(v, info.field_name)


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class AvatarUpload(CamelModel):
    avatar_base64: str  # data:image/...;base64,<payload> or the bare payload


class AvatarData(CamelModel):
    avatar_url: str
