"""
Attendance Router - admin-only daily attendance.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.users.auth import TokenData, require_admin
from .service import AttendanceService
from .schemas import AttendanceResponse, CreateAttendanceDto

router = APIRouter(prefix="/attendance", tags=["attendance"], route_class=CustomAPIRoute)


@router.post("", response_model=AttendanceResponse, status_code=201)
async def create_attendance(
    dto: CreateAttendanceDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    """Record today's attendance for a user (Admin only)"""
    attendance = await AttendanceService.create(db, dto)
    await db.commit()
    return attendance


@router.get("", response_model=List[AttendanceResponse])
async def get_attendances(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    return await AttendanceService.find_all(db)


@router.get("/today", response_model=List[AttendanceResponse])
async def get_today_attendance(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    return await AttendanceService.today(db)


@router.get("/history", response_model=List[AttendanceResponse])
async def get_attendance_history(
    user_id: Optional[int] = Query(None, gt=0),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    """All attendance, latest date first"""
    return await AttendanceService.history(db, user_id)
