"""
Transactions Router - carts, checkout, refunds and transaction history.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.pagination import PageParams, build_paginated_response, page_params
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.audit_logs.router import audit_context
from pos_api.modules.users.auth import TokenData, require_any_role
from .models import Transaction, TransactionStatus
from .service import TransactionsService
from .schemas import (
    CheckoutDto,
    CreateTransactionDto,
    TransactionResponse,
    TransactionResult,
    UpdateTransactionDto,
)

router = APIRouter(prefix="/transactions", tags=["transactions"], route_class=CustomAPIRoute)


def _page(transactions: List[Transaction], total: int, pages: PageParams) -> dict:
    return build_paginated_response(
        [TransactionResponse.model_validate(t) for t in transactions],
        total,
        pages.page,
        pages.page_size,
    )


def _result(transaction: Transaction, warnings: Optional[List[str]] = None) -> TransactionResult:
    return TransactionResult(
        transaction=TransactionResponse.model_validate(transaction),
        warnings=warnings or [],
    )


@router.post("", response_model=TransactionResult, status_code=201)
async def create_transaction(
    dto: CreateTransactionDto,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """
    Create a transaction as a draft cart or a completed sale.

    Completed sales:
    - Require payment >= total after discount
    - Decrement stock (underflow handled by STOCK_UNDERFLOW_POLICY)
    - Queue a WhatsApp notification once committed
    """
    transaction, warnings = await TransactionsService.create(
        db, dto, audit_context(request, current_user)
    )
    await db.commit()
    if transaction.status == TransactionStatus.completed:
        TransactionsService.notify_completed(transaction)
    return _result(transaction, warnings)


@router.get("")
async def list_transactions(
    day: Optional[date] = Query(None, alias="date", description="Only this business day (YYYY-MM-DD)"),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    transactions, total = await TransactionsService.find_all(
        db, pages.page, pages.page_size, day
    )
    return _page(transactions, total, pages)


@router.get("/history")
async def transaction_history(
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Completed and refunded transactions, newest first"""
    transactions, total = await TransactionsService.find_by_statuses(
        db,
        [TransactionStatus.completed, TransactionStatus.refunded],
        pages.page,
        pages.page_size,
    )
    return _page(transactions, total, pages)


@router.get("/drafts")
async def list_drafts(
    status: TransactionStatus = Query(TransactionStatus.draft),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Transactions of one status, drafts by default"""
    transactions, total = await TransactionsService.find_by_statuses(
        db, [status], pages.page, pages.page_size
    )
    return _page(transactions, total, pages)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    return await TransactionsService.find_one(db, transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResult)
async def update_transaction(
    transaction_id: int,
    dto: UpdateTransactionDto,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    transaction = await TransactionsService.update(
        db, transaction_id, dto, audit_context(request, current_user)
    )
    await db.commit()
    return _result(transaction)


@router.post("/{transaction_id}/checkout", response_model=TransactionResult)
async def checkout_transaction(
    transaction_id: int,
    dto: CheckoutDto,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Complete a draft: payment must cover the total"""
    transaction, warnings = await TransactionsService.checkout(
        db, transaction_id, dto, audit_context(request, current_user)
    )
    await db.commit()
    TransactionsService.notify_completed(transaction)
    return _result(transaction, warnings)


@router.post("/{transaction_id}/refund", response_model=TransactionResult)
async def refund_transaction(
    transaction_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Refund a completed transaction and restore stock"""
    transaction = await TransactionsService.refund(
        db, transaction_id, audit_context(request, current_user)
    )
    await db.commit()
    return _result(transaction)


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Soft delete a draft transaction"""
    await TransactionsService.remove(db, transaction_id, audit_context(request, current_user))
    await db.commit()
    return {"message": "Transaction deleted successfully"}
