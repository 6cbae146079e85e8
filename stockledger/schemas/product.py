from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.constants import SKU_PATTERN


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProductCreate(BaseModel):
    sku: str = Field(pattern=SKU_PATTERN)
    name: str = Field(min_length=2)
    description: Optional[str] = None
    price: float = Field(gt=0)
    quantity: int = Field(ge=0)
    category: Optional[str] = None
    supplier: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("description", "category", "supplier", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _blank_to_none(value)

    def to_record(self) -> dict:
        return self.model_dump(exclude_none=True)
