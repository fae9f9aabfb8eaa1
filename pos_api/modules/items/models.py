from decimal import Decimal
from sqlalchemy import String, Text, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from pos_api.core.db import BaseModel


class Item(BaseModel):
    """
    Catalog item.

    Names are unique among non-deleted items. That is checked by lookup in
    the service rather than an index, since soft-deleted rows keep their
    name and stay referenced by transaction lines.
    """

    __tablename__ = "items"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    buy_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )

    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True, default=None)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name='{self.name}', stock={self.stock})>"
