import enum
from typing import Any, Optional
from sqlalchemy import Integer, String, Text, ForeignKey, JSON, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from pos_api.core.db.base import BaseModel


class AuditAction(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    checkout = "checkout"
    refund = "refund"


class AuditLog(BaseModel):
    """
    Append-only record of a mutation: before/after snapshots plus the
    field-level diff for updates.
    """

    __tablename__ = "audit_logs"

    __table_args__ = (
        Index("idx_audit_log_entity", "entity_type", "entity_id"),
    )

    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)

    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)

    action: Mapped[AuditAction] = mapped_column(
        SQLEnum(AuditAction, name="audit_action_enum", native_enum=False),
        nullable=False,
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", name="fk_audit_log_user_id"), nullable=True, default=None
    )

    old_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=None)

    new_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=None)

    changes: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=None)

    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, default=None)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, entity={self.entity_type}:{self.entity_id}, action='{self.action.value}')>"
