from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.constants import SKU_PATTERN
from stockledger.schemas.product import _blank_to_none


class TransactionCreate(BaseModel):
    sku: str = Field(pattern=SKU_PATTERN)
    type: Literal["IN", "OUT", "ADJUSTMENT"]
    quantity: int
    reason: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("reason", mode="before")
    @classmethod
    def _optional_reason(cls, value):
        return _blank_to_none(value)

    @field_validator("quantity")
    @classmethod
    def _non_zero(cls, value):
        if value == 0:
            raise ValueError("quantity must be a non-zero integer")
        return value
