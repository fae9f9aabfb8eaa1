import enum
from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from pos_api.core.db.base import BaseModel


class Role(str, enum.Enum):
    """User role enum"""

    ADMIN = "admin"
    CASHIER = "cashier"


class User(BaseModel):
    """
    User model (store staff).
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    # bcrypt hash, never serialized
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(
        SQLEnum(
            Role,
            name="users_role_enum",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=Role.CASHIER,
        server_default=Role.CASHIER.value,
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role.value})>"
