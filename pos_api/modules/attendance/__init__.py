"""Attendance module"""

from .models import Attendance, AttendanceStatus
from .service import AttendanceService
from .router import router

__all__ = ["Attendance", "AttendanceStatus", "AttendanceService", "router"]
