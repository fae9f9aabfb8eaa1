"""
AttendanceService - daily attendance recorded by admins.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pos_api.core.exceptions import NotFoundError, ValidationError
from pos_api.core.utils import business_today
from pos_api.modules.users.models import User

from .models import Attendance
from .schemas import CreateAttendanceDto


def _base_query():
    return (
        select(Attendance)
        .where(Attendance.deleted_at.is_(None))
        .options(selectinload(Attendance.user))
    )


class AttendanceService:

    @staticmethod
    async def create(db: AsyncSession, dto: CreateAttendanceDto) -> Attendance:
        """
        Record today's attendance for a user.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the user already has a row for today
        """
        user = (
            await db.execute(
                select(User).where(User.id == dto.user_id, User.deleted_at.is_(None))
            )
        ).scalar_one_or_none()
        if not user:
            raise NotFoundError("User", dto.user_id)

        today = business_today()
        existing = (
            await db.execute(
                select(Attendance.id).where(
                    Attendance.user_id == dto.user_id,
                    Attendance.date == today,
                    Attendance.deleted_at.is_(None),
                )
            )
        ).scalar_one_or_none()
        if existing is not None:
            raise ValidationError(f"Attendance for '{user.name}' is already recorded today")

        attendance = Attendance(
            user=user,
            date=today,
            status=dto.status,
            note=dto.note,
        )
        db.add(attendance)
        await db.flush()
        return attendance

    @staticmethod
    async def today(db: AsyncSession) -> List[Attendance]:
        result = await db.execute(
            _base_query()
            .where(Attendance.date == business_today())
            .order_by(Attendance.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def history(db: AsyncSession, user_id: Optional[int] = None) -> List[Attendance]:
        """All attendance, latest date first, optionally for one user."""
        query = _base_query()
        if user_id is not None:
            query = query.where(Attendance.user_id == user_id)
        result = await db.execute(query.order_by(Attendance.date.desc(), Attendance.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def find_all(db: AsyncSession) -> List[Attendance]:
        result = await db.execute(_base_query().order_by(Attendance.id))
        return list(result.scalars().all())
