"""Transactions module"""

from .models import Transaction, TransactionItem, TransactionStatus, PaymentType
from .service import TransactionsService
from .router import router

__all__ = [
    "Transaction",
    "TransactionItem",
    "TransactionStatus",
    "PaymentType",
    "TransactionsService",
    "router",
]
