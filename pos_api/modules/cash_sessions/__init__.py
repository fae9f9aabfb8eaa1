"""Cash sessions module"""

from .models import CashSession, CashSessionStatus
from .service import CashSessionService
from .router import router

__all__ = ["CashSession", "CashSessionStatus", "CashSessionService", "router"]
