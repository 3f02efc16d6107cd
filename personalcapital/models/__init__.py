"""
Domain models for Personal Capital.

These are immutable (frozen) dataclasses decoded from spData payloads.
"""

from personalcapital.models.accounts import Account, Accounts
from personalcapital.models.auth import (
    AuthLevel,
    IdentifyUser,
    LoginStatus,
    ResponseHeader,
    UserStatus,
)
from personalcapital.models.histories import Histories, History, HistoryType
from personalcapital.models.holdings import Holding, Holdings
from personalcapital.models.spending import SpendingInterval, UserSpending
from personalcapital.models.transactions import (
    Category,
    IntervalType,
    Tag,
    Transaction,
    TransactionStatus,
    UserTransactions,
)

__all__ = [
    # Auth
    "AuthLevel",
    "LoginStatus",
    "UserStatus",
    "ResponseHeader",
    "IdentifyUser",
    # Accounts
    "Account",
    "Accounts",
    # Transactions
    "Transaction",
    "TransactionStatus",
    "UserTransactions",
    "Category",
    "Tag",
    "IntervalType",
    # Spending, holdings, histories
    "UserSpending",
    "SpendingInterval",
    "Holding",
    "Holdings",
    "History",
    "Histories",
    "HistoryType",
]
