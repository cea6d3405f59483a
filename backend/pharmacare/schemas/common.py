from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# Largest value an Integer column holds on every supported database
MAX_DB_INT = 2**31 - 1


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (fullName, unitPrice, ...)."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


def require_text(value: str, field: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field} cannot be empty")
    return value.strip()


def ok(data=None, message: str = "Success") -> dict:
    """Standard success envelope. Pydantic payloads are dumped with camelCase keys."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    elif isinstance(data, list):
        data = [
            item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else item
            for item in data
        ]
    return {"success": True, "message": message, "data": data}
