"""
Transaction ordering matching the web UI.

The UI sorts by: pending first, newest date, highest id, account name,
signed amount, description, price, quantity. Names and descriptions compare
case-insensitively; missing prices and quantities sort first.
"""

from collections.abc import Callable, Iterable
from functools import cmp_to_key

from personalcapital.models.transactions import Transaction, TransactionStatus

Comparison = Callable[[Transaction, Transaction], int]


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def _cmp_optional(a: float | None, b: float | None) -> int:
    if a is None or b is None:
        return _cmp(a is not None, b is not None)
    return _cmp(a, b)


def _by_status(a: Transaction, b: Transaction) -> int:
    return _cmp(b.status == TransactionStatus.PENDING, a.status == TransactionStatus.PENDING)


def _by_date(a: Transaction, b: Transaction) -> int:
    return _cmp(b.transaction_date, a.transaction_date)


def _by_id(a: Transaction, b: Transaction) -> int:
    return _cmp(b.user_transaction_id, a.user_transaction_id)


def _by_account_name(a: Transaction, b: Transaction) -> int:
    return _cmp(a.account_name.upper(), b.account_name.upper())


def _by_amount(a: Transaction, b: Transaction) -> int:
    return _cmp(a.signed_amount, b.signed_amount)


def _by_description(a: Transaction, b: Transaction) -> int:
    return _cmp(a.description.upper(), b.description.upper())


def _by_price(a: Transaction, b: Transaction) -> int:
    return _cmp_optional(a.price, b.price)


def _by_quantity(a: Transaction, b: Transaction) -> int:
    return _cmp_optional(a.quantity, b.quantity)


COMPARISONS: tuple[Comparison, ...] = (
    _by_status,
    _by_date,
    _by_id,
    _by_account_name,
    _by_amount,
    _by_description,
    _by_price,
    _by_quantity,
)


def compare_transactions(a: Transaction, b: Transaction) -> int:
    """Three-way comparison in UI order: negative if ``a`` comes first."""
    for comparison in COMPARISONS:
        result = comparison(a, b)
        if result:
            return result
    return 0


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return the transactions in the order the web UI shows them."""
    return sorted(transactions, key=cmp_to_key(compare_transactions))
