"""
Item DTOs
"""

from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from pos_api.core.utils import to_money


class CreateItemDto(BaseModel):
    """DTO for creating a single item"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    stock: int = Field(0, description="Units on hand")
    buy_price: Decimal = Field(Decimal("0.00"), ge=0, max_digits=15, decimal_places=2)
    price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("buy_price", "price")
    @classmethod
    def round_money(cls, value: Decimal) -> Decimal:
        return to_money(value)

    @field_validator("description", "image_url")
    @classmethod
    def empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.strip() == "":
            return None
        return value

    class Config:
        from_attributes = True


class UpdateItemDto(CreateItemDto):
    """
    Full replacement of the editable fields (PUT).
    """


class ItemResponse(BaseModel):
    """Every item field; callers only ever see a role projection of it."""

    id: int
    name: str
    description: Optional[str] = None
    stock: int
    buy_price: Decimal
    price: Decimal
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

