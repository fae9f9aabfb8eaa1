"""
Dashboard DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal


class DashboardFilterDto(BaseModel):
    from_date: Optional[date] = Field(None, description="Inclusive business day")
    to_date: Optional[date] = Field(None, description="Inclusive business day")


class DashboardTransactionItemResponse(BaseModel):
    item_id: int
    name: str
    quantity: int
    price: Decimal
    subtotal: Decimal


class DashboardTransactionResponse(BaseModel):
    """Simplified transaction data for dashboard"""

    id: int
    status: str
    total: Decimal
    created_at: datetime
    items: List[DashboardTransactionItemResponse]


class TopItemResponse(BaseModel):
    item_id: int
    name: str
    quantity: int


class DashboardResponse(BaseModel):
    """Everything the dashboard shows, in one payload"""

    total_items: int = Field(..., description="Active catalog items")
    total_transactions: int
    draft: int
    completed: int
    refunded: int
    total_revenue: Decimal = Field(..., description="Sum of completed line subtotals in the window")
    total_profit: Decimal = Field(..., description="Sum of quantity * (sale price - buy price) in the window")
    today_profit: Decimal
    low_stock: int = Field(..., description="Items with stock below the threshold")
    recent_transactions: List[DashboardTransactionResponse]
    top_selling_items: List[TopItemResponse]
