import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import DateTime, ForeignKey, Numeric, Text, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from pos_api.core.db.base import BaseModel
from pos_api.core.utils import utcnow


class CashSessionStatus(str, enum.Enum):
    open = "open"
    closed = "closed"


class CashSession(BaseModel):
    """
    A cashier's drawer session. At most one open session per user, checked
    by lookup before insert.
    """

    __tablename__ = "cash_sessions"

    __table_args__ = (
        Index("idx_cash_session_user_status", "user_id", "status"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", name="fk_cash_session_user_id"), nullable=False
    )

    status: Mapped[CashSessionStatus] = mapped_column(
        SQLEnum(CashSessionStatus, name="cash_session_status_enum", native_enum=False),
        nullable=False,
        default=CashSessionStatus.open,
    )

    opening_cash: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)

    opened_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)

    closing_cash: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, default=None)

    # Filled in on close
    expected_cash: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    total_cash_in: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    total_change: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    difference: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    def __repr__(self) -> str:
        return f"<CashSession(id={self.id}, user_id={self.user_id}, status='{self.status.value}')>"
