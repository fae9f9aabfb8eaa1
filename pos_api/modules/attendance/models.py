import enum
import datetime
from sqlalchemy import Date, ForeignKey, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from pos_api.core.db.base import BaseModel

if TYPE_CHECKING:
    from pos_api.modules.users.models import User


class AttendanceStatus(str, enum.Enum):
    present = "present"
    absent = "absent"
    off = "off"


class Attendance(BaseModel):
    """One row per user per business day, recorded by an admin."""

    __tablename__ = "attendance"

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", name="fk_attendance_user_id"), nullable=False, index=True
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)

    status: Mapped[AttendanceStatus] = mapped_column(
        SQLEnum(AttendanceStatus, name="attendance_status_enum", native_enum=False),
        nullable=False,
    )

    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    user: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<Attendance(id={self.id}, user_id={self.user_id}, date={self.date}, status='{self.status.value}')>"
