"""
Transaction DTOs
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from .models import TransactionStatus, PaymentType


# ============================================================================
# Request DTOs
# ============================================================================


class TransactionLineCreate(BaseModel):
    """One cart line. Quantity is checked in the service so the error reads well."""

    item_id: int = Field(..., gt=0, description="Item ID")
    quantity: int = Field(..., description="Units sold, must be positive")
    custom_price: Optional[Decimal] = Field(
        None, description="Overrides the catalog price when >= 0"
    )

    class Config:
        from_attributes = True


class CreateTransactionDto(BaseModel):
    """Create a cart (draft) or a finished sale (completed)"""

    status: str = Field("draft", description="draft or completed")
    items: List[TransactionLineCreate] = Field(default_factory=list)
    discount: Optional[Decimal] = Field(None, description="Negative values count as 0")
    payment: Optional[Decimal] = Field(None, ge=0, description="Required when completed")
    payment_type: Optional[PaymentType] = None
    note: Optional[str] = Field(None, max_length=1000)
    transaction_type: Optional[str] = Field(None, max_length=50, description="Defaults to onsite")

    class Config:
        from_attributes = True


class CheckoutDto(BaseModel):
    payment: Decimal = Field(..., ge=0)
    payment_type: Optional[PaymentType] = None


class UpdateTransactionDto(BaseModel):
    """
    Metadata edits. Discount only on drafts; status may only restate draft.
    """

    note: Optional[str] = Field(None, max_length=1000)
    transaction_type: Optional[str] = Field(None, max_length=50)
    discount: Optional[Decimal] = None
    status: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class LineItemSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class TransactionItemResponse(BaseModel):
    """Response model for a transaction line"""

    id: int
    item_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal
    item: Optional[LineItemSummary] = None

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    """Response model for Transaction entity with its lines"""

    id: int
    status: TransactionStatus
    total: Decimal
    discount: Decimal
    payment: Optional[Decimal] = None
    change: Optional[Decimal] = None
    payment_type: Optional[PaymentType] = None
    note: Optional[str] = None
    transaction_type: str
    user_id: Optional[int] = None
    items: List[TransactionItemResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionResult(BaseModel):
    """A mutated transaction plus any stock warnings raised on the way"""

    transaction: TransactionResponse
    warnings: List[str] = []
