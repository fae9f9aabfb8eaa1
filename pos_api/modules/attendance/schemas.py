"""
Attendance DTOs
"""

from pydantic import BaseModel, Field
from typing import Optional
import datetime

from .models import AttendanceStatus


class CreateAttendanceDto(BaseModel):
    user_id: int = Field(..., gt=0)
    status: AttendanceStatus
    note: Optional[str] = Field(None, max_length=1000)


class AttendanceUserSummary(BaseModel):
    id: int
    name: str
    username: str

    class Config:
        from_attributes = True


class AttendanceResponse(BaseModel):
    id: int
    user_id: int
    date: datetime.date
    status: AttendanceStatus
    note: Optional[str] = None
    user: AttendanceUserSummary
    created_at: datetime.datetime

    class Config:
        from_attributes = True
