"""
Cash session DTOs
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from .models import CashSessionStatus


class OpenCashSessionDto(BaseModel):
    opening_cash: Decimal = Field(..., ge=0, description="Cash in the drawer at open")
    note: Optional[str] = Field(None, max_length=1000)


class CloseCashSessionDto(BaseModel):
    closing_cash: Decimal = Field(..., ge=0, description="Cash counted in the drawer at close")
    note: Optional[str] = Field(None, max_length=1000)


class CashSessionHistoryFilterDto(BaseModel):
    start_date: Optional[date] = Field(None, description="Inclusive, business day")
    end_date: Optional[date] = Field(None, description="Inclusive, business day")


class CashSessionResponse(BaseModel):
    """Response model for a cash session"""

    id: int
    user_id: int
    status: CashSessionStatus
    opening_cash: Decimal
    opened_at: datetime
    closing_cash: Optional[Decimal] = None
    closed_at: Optional[datetime] = None
    expected_cash: Optional[Decimal] = None
    total_cash_in: Optional[Decimal] = None
    total_change: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
