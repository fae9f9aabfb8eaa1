import enum
from decimal import Decimal
from sqlalchemy import (
    String,
    Numeric,
    Integer,
    Text,
    ForeignKey,
    Enum as SQLEnum,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, List, Optional

from pos_api.core.db.base import BaseModel

if TYPE_CHECKING:
    from pos_api.modules.items.models import Item


class TransactionStatus(str, enum.Enum):
    """Transaction lifecycle: draft -> completed -> refunded"""

    draft = "draft"
    completed = "completed"
    refunded = "refunded"


class PaymentType(str, enum.Enum):
    """Payment method enum"""

    cash = "cash"
    qris = "qris"
    debit = "debit"
    credit = "credit"


class Transaction(BaseModel):
    """
    A sale, from open cart (draft) to finalized or refunded.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_status_created", "status", "created_at"),
        Index("idx_transaction_payment_type", "payment_type"),
    )

    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, name="transaction_status_enum", native_enum=False),
        nullable=False,
        default=TransactionStatus.draft,
    )

    # Financial fields - all with 15 digits total, 2 decimal places
    total: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0"),
    )

    discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    payment: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    change: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    payment_type: Mapped[Optional[PaymentType]] = mapped_column(
        SQLEnum(PaymentType, name="payment_type_enum", native_enum=False),
        nullable=True,
        default=None,
    )

    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    # Free text, e.g. onsite, takeaway, delivery
    transaction_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="onsite", server_default="onsite"
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", name="fk_transaction_user_id"),
        nullable=True,
        index=True,
        default=None,
    )

    items: Mapped[List["TransactionItem"]] = relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.id",
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, status='{self.status.value}', total={self.total})>"


class TransactionItem(BaseModel):
    """
    One line of a transaction. The unit price is a snapshot taken when the
    line is created and is never re-read from the catalog.
    """

    __tablename__ = "transaction_items"

    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id", name="fk_transaction_item_transaction_id"),
        nullable=False,
        index=True,
    )

    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", name="fk_transaction_item_item_id"),
        nullable=False,
        index=True,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)

    transaction: Mapped["Transaction"] = relationship("Transaction", back_populates="items")

    item: Mapped["Item"] = relationship("Item")

    def __repr__(self) -> str:
        return f"<TransactionItem(id={self.id}, item_id={self.item_id}, quantity={self.quantity})>"
