"""
TransactionsService - carts, checkout, refunds and the stock they move.

Services flush but never commit. Routers commit, then hand completed
transactions to the notification queue.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pos_api.core.config import config
from pos_api.core.exceptions import NotFoundError, ValidationError
from pos_api.core.notifications import (
    Notification,
    format_transaction_message,
    notification_queue,
)
from pos_api.core.pagination import paginate_query
from pos_api.core.utils import business_day_range, business_now, format_rupiah, to_money, utcnow
from pos_api.modules.audit_logs.diff import snapshot
from pos_api.modules.audit_logs.models import AuditAction
from pos_api.modules.audit_logs.service import AuditContext, AuditLogService
from pos_api.modules.items.models import Item

from .models import PaymentType, Transaction, TransactionItem, TransactionStatus
from .pricing import compute_change, compute_totals, decrement_stock, price_line
from .schemas import CheckoutDto, CreateTransactionDto, UpdateTransactionDto

logger = logging.getLogger(__name__)

ENTITY_TYPE = "transaction"

AUDITED_FIELDS = (
    "status",
    "total",
    "discount",
    "payment",
    "change",
    "payment_type",
    "note",
    "transaction_type",
)
AUDITED_LINE_FIELDS = ("item_id", "quantity", "price", "subtotal")

CREATABLE_STATUSES = (TransactionStatus.draft, TransactionStatus.completed)


def transaction_snapshot(transaction: Transaction) -> dict:
    data = snapshot(transaction, AUDITED_FIELDS)
    data["items"] = [snapshot(line, AUDITED_LINE_FIELDS) for line in transaction.items]
    return data


def _with_lines(query):
    return query.options(
        selectinload(Transaction.items).selectinload(TransactionItem.item)
    )


class TransactionsService:
    """
    Transaction state machine:
    - draft -> completed (checkout) decrements stock and records payment
    - draft -> deleted (soft)
    - completed -> refunded restores stock and clears payment/change
    """

    @staticmethod
    def _parse_status(value: str) -> TransactionStatus:
        try:
            status = TransactionStatus(value)
        except ValueError:
            status = None
        if status not in CREATABLE_STATUSES:
            raise ValidationError("Status must be 'draft' or 'completed'")
        return status

    @staticmethod
    async def _load_items(db: AsyncSession, item_ids: Set[int]) -> Dict[int, Item]:
        """
        Raises:
            NotFoundError: If any id is missing or soft-deleted
        """
        result = await db.execute(
            select(Item).where(Item.id.in_(item_ids), Item.deleted_at.is_(None))
        )
        items = {item.id: item for item in result.scalars().all()}
        for item_id in sorted(item_ids):
            if item_id not in items:
                raise NotFoundError("Item", item_id)
        return items

    @staticmethod
    def _take_stock(lines: Iterable[Tuple[Item, int]]) -> List[str]:
        """Decrement stock for each (item, quantity) and collect warnings."""
        policy = config.stock_underflow_policy
        warnings = []
        for item, quantity in lines:
            item.stock, warning = decrement_stock(item.stock, quantity, policy, item.name)
            if warning:
                logger.warning(f"Stock underflow ({policy}): {warning}")
                warnings.append(warning)
        return warnings

    @staticmethod
    async def find_one(db: AsyncSession, transaction_id: int) -> Transaction:
        """
        Find a transaction with its lines.

        Raises:
            NotFoundError: If not found or soft-deleted
        """
        query = _with_lines(
            select(Transaction).where(
                Transaction.id == transaction_id, Transaction.deleted_at.is_(None)
            )
        ).execution_options(populate_existing=True)

        transaction = (await db.execute(query)).scalar_one_or_none()
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    @staticmethod
    async def create(
        db: AsyncSession, dto: CreateTransactionDto, context: AuditContext
    ) -> Tuple[Transaction, List[str]]:
        """
        Create a draft cart or a completed sale.

        Business Logic:
        1. Validate status and that there is at least one line
        2. Price each line (custom price wins when >= 0)
        3. Apply discount, floor the total at 0
        4. If completed: check payment, compute change, take stock

        Returns:
            Tuple of (transaction, stock warnings)

        Raises:
            ValidationError: Bad status, empty cart, bad quantity, short payment
            NotFoundError: Unknown item
        """
        status = TransactionsService._parse_status(dto.status)
        if not dto.items:
            raise ValidationError("Transaction must have at least one item")

        catalog = await TransactionsService._load_items(db, {line.item_id for line in dto.items})

        priced = [
            price_line(
                line.item_id,
                line.quantity,
                catalog[line.item_id].price,
                line.custom_price,
            )
            for line in dto.items
        ]
        totals = compute_totals([line.subtotal for line in priced], dto.discount)

        transaction = Transaction(
            status=status,
            total=totals.total,
            discount=totals.discount,
            payment_type=dto.payment_type or PaymentType.cash,
            note=dto.note,
            transaction_type=dto.transaction_type or "onsite",
            user_id=context.user_id,
        )

        warnings: List[str] = []
        if status == TransactionStatus.completed:
            transaction.change = compute_change(dto.payment, totals.total)
            transaction.payment = to_money(dto.payment)
            warnings = TransactionsService._take_stock(
                (catalog[line.item_id], line.quantity) for line in priced
            )

        transaction.items = [
            TransactionItem(
                item=catalog[line.item_id],
                quantity=line.quantity,
                price=line.price,
                subtotal=line.subtotal,
            )
            for line in priced
        ]
        db.add(transaction)
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            transaction.id,
            AuditAction.create,
            old=None,
            new=transaction_snapshot(transaction),
            context=context,
            description=f"Created {status.value} transaction #{transaction.id}",
        )
        return transaction, warnings

    @staticmethod
    async def checkout(
        db: AsyncSession, transaction_id: int, dto: CheckoutDto, context: AuditContext
    ) -> Tuple[Transaction, List[str]]:
        """
        Complete a draft: validate payment, take stock, record change.

        Raises:
            ValidationError: Not a draft, or payment below the total
        """
        transaction = await TransactionsService.find_one(db, transaction_id)
        if transaction.status != TransactionStatus.draft:
            raise ValidationError(
                f"Only draft transactions can be checked out (current: {transaction.status.value})"
            )

        old = transaction_snapshot(transaction)
        change = compute_change(dto.payment, transaction.total)
        warnings = TransactionsService._take_stock(
            (line.item, line.quantity) for line in transaction.items
        )

        transaction.payment = to_money(dto.payment)
        transaction.change = change
        transaction.payment_type = dto.payment_type or transaction.payment_type or PaymentType.cash
        transaction.status = TransactionStatus.completed
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            transaction.id,
            AuditAction.checkout,
            old=old,
            new=transaction_snapshot(transaction),
            context=context,
            description=f"Checked out transaction #{transaction.id}",
        )
        return transaction, warnings

    @staticmethod
    async def refund(
        db: AsyncSession, transaction_id: int, context: AuditContext
    ) -> Transaction:
        """
        Refund a completed transaction, putting every line back in stock.

        Raises:
            ValidationError: If the transaction is not completed
        """
        transaction = await TransactionsService.find_one(db, transaction_id)
        if transaction.status != TransactionStatus.completed:
            raise ValidationError(
                f"Only completed transactions can be refunded (current: {transaction.status.value})"
            )

        old = transaction_snapshot(transaction)
        for line in transaction.items:
            line.item.stock += line.quantity

        transaction.payment = None
        transaction.change = None
        transaction.status = TransactionStatus.refunded
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            transaction.id,
            AuditAction.refund,
            old=old,
            new=transaction_snapshot(transaction),
            context=context,
            description=f"Refunded transaction #{transaction.id}",
        )
        return transaction

    @staticmethod
    async def update(
        db: AsyncSession,
        transaction_id: int,
        dto: UpdateTransactionDto,
        context: AuditContext,
    ) -> Transaction:
        """
        Edit note, transaction type and (drafts only) discount.

        Status can be sent but only to restate 'draft' on a draft; completing
        goes through checkout.

        Raises:
            ValidationError: On any disallowed edit
        """
        transaction = await TransactionsService.find_one(db, transaction_id)
        update_data = dto.model_dump(exclude_unset=True)
        is_draft = transaction.status == TransactionStatus.draft

        status = update_data.get("status")
        if status is not None and (not is_draft or status != TransactionStatus.draft.value):
            if status == TransactionStatus.completed.value and is_draft:
                raise ValidationError("Use checkout to complete a transaction")
            raise ValidationError(
                f"Cannot change status from '{transaction.status.value}' to '{status}'"
            )

        if update_data.get("discount") is not None and not is_draft:
            raise ValidationError("Discount can only be changed on draft transactions")

        old = transaction_snapshot(transaction)

        if "note" in update_data:
            transaction.note = update_data["note"]
        if update_data.get("transaction_type"):
            transaction.transaction_type = update_data["transaction_type"]
        if update_data.get("discount") is not None:
            totals = compute_totals(
                [line.subtotal for line in transaction.items], update_data["discount"]
            )
            transaction.discount = totals.discount
            transaction.total = totals.total

        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            transaction.id,
            AuditAction.update,
            old=old,
            new=transaction_snapshot(transaction),
            context=context,
            description=f"Updated transaction #{transaction.id}",
        )
        return transaction

    @staticmethod
    async def remove(
        db: AsyncSession, transaction_id: int, context: AuditContext
    ) -> None:
        """
        Soft delete a draft.

        Raises:
            ValidationError: If the transaction is not a draft
        """
        transaction = await TransactionsService.find_one(db, transaction_id)
        if transaction.status != TransactionStatus.draft:
            raise ValidationError("Only draft transactions can be deleted")

        old = transaction_snapshot(transaction)
        transaction.deleted_at = utcnow()
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            transaction.id,
            AuditAction.delete,
            old=old,
            new=None,
            context=context,
            description=f"Deleted draft transaction #{transaction.id}",
        )

    @staticmethod
    async def find_all(
        db: AsyncSession, page: int, page_size: int, day: Optional[date] = None
    ) -> Tuple[List[Transaction], int]:
        """All transactions newest first, optionally limited to one business day."""
        query = select(Transaction).where(Transaction.deleted_at.is_(None))
        if day is not None:
            start, end = business_day_range(day)
            query = query.where(Transaction.created_at >= start, Transaction.created_at < end)

        query = _with_lines(query).order_by(Transaction.created_at.desc(), Transaction.id.desc())
        return await paginate_query(db, query, page, page_size)

    @staticmethod
    async def find_by_statuses(
        db: AsyncSession,
        statuses: List[TransactionStatus],
        page: int,
        page_size: int,
    ) -> Tuple[List[Transaction], int]:
        """Newest first, restricted to the given statuses (history, drafts)."""
        query = _with_lines(
            select(Transaction).where(
                Transaction.deleted_at.is_(None), Transaction.status.in_(statuses)
            )
        ).order_by(Transaction.created_at.desc(), Transaction.id.desc())
        return await paginate_query(db, query, page, page_size)

    @staticmethod
    def notify_completed(transaction: Transaction) -> bool:
        """
        Queue the 'new transaction' WhatsApp message. Call after commit.

        Returns:
            True if the message was queued
        """
        lines = [
            f"{line.item.name} x{line.quantity} = {format_rupiah(line.subtotal)}"
            for line in transaction.items
        ]
        message = format_transaction_message(
            transaction.id,
            transaction.status.value,
            format_rupiah(transaction.total),
            lines,
            business_now().strftime("%d/%m/%Y %H:%M:%S"),
        )
        return notification_queue.enqueue(
            Notification(target=config.notify_target or "", message=message)
        )
