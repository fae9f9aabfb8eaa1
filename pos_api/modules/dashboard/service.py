"""
DashboardService - Business logic for aggregating dashboard data.
Sums and counts run in SQL; only the recent transactions are loaded as rows.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pos_api.core.config import config
from pos_api.core.utils import business_day_range, business_today, to_money
from pos_api.modules.items.models import Item
from pos_api.modules.items.service import ItemService
from pos_api.modules.transactions.models import Transaction, TransactionItem, TransactionStatus
from .schemas import (
    DashboardFilterDto,
    DashboardResponse,
    DashboardTransactionItemResponse,
    DashboardTransactionResponse,
    TopItemResponse,
)

RECENT_TRANSACTIONS = 3
TOP_ITEMS = 5


class DashboardService:
    """
    Dashboard service for aggregating all dashboard data.
    """

    @staticmethod
    async def _revenue_and_profit(
        db: AsyncSession,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[Decimal, Decimal]:
        """
        Revenue and profit over completed transaction lines created in
        [start, end). Profit uses the item's current buy price.
        """
        profit = TransactionItem.quantity * (TransactionItem.price - Item.buy_price)
        query = (
            select(
                func.coalesce(func.sum(TransactionItem.subtotal), 0),
                func.coalesce(func.sum(profit), 0),
            )
            .select_from(TransactionItem)
            .join(Transaction, Transaction.id == TransactionItem.transaction_id)
            .join(Item, Item.id == TransactionItem.item_id)
            .where(
                Transaction.status == TransactionStatus.completed,
                Transaction.deleted_at.is_(None),
            )
        )
        if start is not None:
            query = query.where(Transaction.created_at >= start)
        if end is not None:
            query = query.where(Transaction.created_at < end)

        revenue, total_profit = (await db.execute(query)).one()
        return to_money(revenue), to_money(total_profit)

    @staticmethod
    async def get_dashboard_data(
        db: AsyncSession, filters: DashboardFilterDto
    ) -> DashboardResponse:
        """
        Get all dashboard data.

        The date window (inclusive business days) narrows revenue and
        profit only; counts, low stock and top sellers cover everything.
        """
        # 1. Counts
        total_items = await ItemService.count_active(db)

        status_rows = await db.execute(
            select(Transaction.status, func.count(Transaction.id))
            .where(Transaction.deleted_at.is_(None))
            .group_by(Transaction.status)
        )
        by_status = {status: count for status, count in status_rows.all()}

        # 2. Revenue and profit
        start = business_day_range(filters.from_date)[0] if filters.from_date else None
        end = business_day_range(filters.to_date)[1] if filters.to_date else None
        total_revenue, total_profit = await DashboardService._revenue_and_profit(db, start, end)

        today_start, today_end = business_day_range(business_today())
        _, today_profit = await DashboardService._revenue_and_profit(db, today_start, today_end)

        # 3. Low stock
        low_stock = (
            await db.execute(
                select(func.count(Item.id)).where(
                    Item.deleted_at.is_(None), Item.stock < config.low_stock_threshold
                )
            )
        ).scalar() or 0

        # 4. Recent transactions
        recent = (
            await db.execute(
                select(Transaction)
                .where(Transaction.deleted_at.is_(None))
                .options(selectinload(Transaction.items).selectinload(TransactionItem.item))
                .order_by(desc(Transaction.created_at), desc(Transaction.id))
                .limit(RECENT_TRANSACTIONS)
            )
        ).scalars().all()

        recent_transactions = [
            DashboardTransactionResponse(
                id=txn.id,
                status=txn.status.value,
                total=txn.total,
                created_at=txn.created_at,
                items=[
                    DashboardTransactionItemResponse(
                        item_id=line.item_id,
                        name=line.item.name,
                        quantity=line.quantity,
                        price=line.price,
                        subtotal=line.subtotal,
                    )
                    for line in txn.items
                ],
            )
            for txn in recent
        ]

        # 5. Top sellers by quantity over completed transactions
        sold = func.sum(TransactionItem.quantity).label("sold")
        top_rows = await db.execute(
            select(TransactionItem.item_id, Item.name, sold)
            .join(Transaction, Transaction.id == TransactionItem.transaction_id)
            .join(Item, Item.id == TransactionItem.item_id)
            .where(
                Transaction.status == TransactionStatus.completed,
                Transaction.deleted_at.is_(None),
            )
            .group_by(TransactionItem.item_id, Item.name)
            .order_by(desc(sold), TransactionItem.item_id)
            .limit(TOP_ITEMS)
        )
        top_selling_items: List[TopItemResponse] = [
            TopItemResponse(item_id=item_id, name=name, quantity=int(quantity))
            for item_id, name, quantity in top_rows.all()
        ]

        return DashboardResponse(
            total_items=total_items,
            total_transactions=sum(by_status.values()),
            draft=by_status.get(TransactionStatus.draft, 0),
            completed=by_status.get(TransactionStatus.completed, 0),
            refunded=by_status.get(TransactionStatus.refunded, 0),
            total_revenue=total_revenue,
            total_profit=total_profit,
            today_profit=today_profit,
            low_stock=low_stock,
            recent_transactions=recent_transactions,
            top_selling_items=top_selling_items,
        )
