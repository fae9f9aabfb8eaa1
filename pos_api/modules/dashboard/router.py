"""
Dashboard Router - FastAPI endpoint for aggregated dashboard data.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.users.auth import TokenData, require_any_role
from .service import DashboardService
from .schemas import DashboardFilterDto, DashboardResponse

router = APIRouter(prefix="/dashboard", tags=["dashboard"], route_class=CustomAPIRoute)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    filters: DashboardFilterDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """
    Get all dashboard data in a single API call.

    Returns:
        - counts: items, transactions, per status, low stock
        - total_revenue / total_profit within from_date..to_date
        - today_profit for the current business day
        - recent_transactions: last 3 with their lines
        - top_selling_items: top 5 by quantity sold
    """
    return await DashboardService.get_dashboard_data(db, filters)
