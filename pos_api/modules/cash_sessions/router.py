"""
Cash Sessions Router - the caller's own drawer sessions.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.pagination import PageParams, build_paginated_response, page_params
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.users.auth import TokenData, require_any_role
from .service import CashSessionService
from .schemas import (
    CashSessionHistoryFilterDto,
    CashSessionResponse,
    CloseCashSessionDto,
    OpenCashSessionDto,
)

router = APIRouter(prefix="/cash-sessions", tags=["cash sessions"], route_class=CustomAPIRoute)


@router.post("", response_model=CashSessionResponse, status_code=201)
async def open_cash_session(
    dto: OpenCashSessionDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Open a drawer session (one open session per user)"""
    session = await CashSessionService.open(db, current_user.user_id, dto)
    await db.commit()
    return session


@router.get("/current", response_model=CashSessionResponse)
async def get_current_cash_session(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    return await CashSessionService.current(db, current_user.user_id)


@router.post("/close", response_model=CashSessionResponse)
async def close_cash_session(
    dto: CloseCashSessionDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """
    Close the open session.

    expected_cash = opening_cash + cash taken in - change given, over
    completed cash transactions since the session opened.
    """
    session = await CashSessionService.close(db, current_user.user_id, dto)
    await db.commit()
    return session


@router.get("/history")
async def get_cash_session_history(
    filters: CashSessionHistoryFilterDto = Depends(),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    sessions, total = await CashSessionService.history(
        db, current_user.user_id, filters, pages.page, pages.page_size
    )
    return build_paginated_response(
        [CashSessionResponse.model_validate(s) for s in sessions],
        total,
        pages.page,
        pages.page_size,
    )
