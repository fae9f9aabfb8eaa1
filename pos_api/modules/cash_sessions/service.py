"""
CashSessionService - open, close and review cash drawer sessions.
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.exceptions import NotFoundError, ValidationError
from pos_api.core.pagination import paginate_query
from pos_api.core.utils import business_day_range, to_money, utcnow
from pos_api.modules.transactions.models import PaymentType, Transaction, TransactionStatus

from .models import CashSession, CashSessionStatus
from .reconcile import reconcile
from .schemas import CashSessionHistoryFilterDto, CloseCashSessionDto, OpenCashSessionDto

logger = logging.getLogger(__name__)


class CashSessionService:

    @staticmethod
    async def _find_open(db: AsyncSession, user_id: int) -> Optional[CashSession]:
        result = await db.execute(
            select(CashSession)
            .where(
                CashSession.user_id == user_id,
                CashSession.status == CashSessionStatus.open,
                CashSession.deleted_at.is_(None),
            )
            .order_by(CashSession.opened_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def open(db: AsyncSession, user_id: int, dto: OpenCashSessionDto) -> CashSession:
        """
        Raises:
            ValidationError: If the user already has an open session
        """
        if await CashSessionService._find_open(db, user_id) is not None:
            raise ValidationError("A cash session is already open")

        session = CashSession(
            user_id=user_id,
            status=CashSessionStatus.open,
            opening_cash=to_money(dto.opening_cash),
            opened_at=utcnow(),
            note=dto.note,
        )
        db.add(session)
        await db.flush()

        logger.info(f"Cash session {session.id} opened by user {user_id} with {session.opening_cash}")
        return session

    @staticmethod
    async def current(db: AsyncSession, user_id: int) -> CashSession:
        """
        Raises:
            NotFoundError: If the user has no open session
        """
        session = await CashSessionService._find_open(db, user_id)
        if session is None:
            raise NotFoundError("Open cash session")
        return session

    @staticmethod
    async def close(db: AsyncSession, user_id: int, dto: CloseCashSessionDto) -> CashSession:
        """
        Close the user's open session and reconcile the drawer.

        Cash in and change are summed over completed cash transactions
        created between the session's opened_at and now.

        Raises:
            ValidationError: If the user has no open session
        """
        session = await CashSessionService._find_open(db, user_id)
        if session is None:
            raise ValidationError("No open cash session to close")

        now = utcnow()
        result = await db.execute(
            select(
                func.coalesce(func.sum(Transaction.payment), 0),
                func.coalesce(func.sum(Transaction.change), 0),
            ).where(
                Transaction.payment_type == PaymentType.cash,
                Transaction.status == TransactionStatus.completed,
                Transaction.deleted_at.is_(None),
                Transaction.created_at >= session.opened_at,
                Transaction.created_at <= now,
            )
        )
        cash_in, change = result.one()

        outcome = reconcile(session.opening_cash, dto.closing_cash, cash_in, change)

        session.closing_cash = to_money(dto.closing_cash)
        session.total_cash_in = outcome.total_cash_in
        session.total_change = outcome.total_change
        session.expected_cash = outcome.expected_cash
        session.difference = outcome.difference
        session.closed_at = now
        session.status = CashSessionStatus.closed
        if dto.note is not None:
            session.note = dto.note
        await db.flush()

        logger.info(
            f"Cash session {session.id} closed by user {user_id}: "
            f"expected {outcome.expected_cash}, declared {session.closing_cash}, "
            f"difference {outcome.difference}"
        )
        return session

    @staticmethod
    async def history(
        db: AsyncSession,
        user_id: int,
        filters: CashSessionHistoryFilterDto,
        page: int,
        page_size: int,
    ) -> Tuple[List[CashSession], int]:
        """The user's sessions, newest first; date bounds are whole business days."""
        query = select(CashSession).where(
            CashSession.user_id == user_id, CashSession.deleted_at.is_(None)
        )
        if filters.start_date:
            start, _ = business_day_range(filters.start_date)
            query = query.where(CashSession.opened_at >= start)
        if filters.end_date:
            _, end = business_day_range(filters.end_date)
            query = query.where(CashSession.opened_at < end)

        query = query.order_by(CashSession.opened_at.desc(), CashSession.id.desc())
        return await paginate_query(db, query, page, page_size)
