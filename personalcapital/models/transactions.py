"""
Transaction, category and tag models.
"""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Self

from personalcapital.models.reader import FieldReader


class TransactionStatus(StrEnum):
    POSTED = "posted"
    PENDING = "pending"


class InvestmentType(StrEnum):
    DIVIDEND = "Dividend"
    TRANSFER = "Transfer"
    BUY = "Buy"
    SELL = "Sell"
    MGMT_FEES = "Mgmt Fees"
    INTEREST = "Interest"


class IntervalType(StrEnum):
    YEAR = "YEAR"
    MONTH = "MONTH"
    WEEK = "WEEK"
    DAY = "DAY"


class CategoryType(StrEnum):
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    TRANSFER = "TRANSFER"
    UNCATEGORIZED = "UNCATEGORIZED"
    DEFERRED_COMPENSATION = "DEFERRED_COMPENSATION"


@dataclass(frozen=True, kw_only=True)
class CustomTags:
    system_tags: tuple[int, ...] = ()
    user_tags: tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            system_tags=tuple(r.opt_array("systemTags", FieldReader.as_integer) or ()),
            user_tags=tuple(r.opt_array("userTags", FieldReader.as_integer) or ()),
        )


@dataclass(frozen=True, kw_only=True)
class Split:
    amount: float
    user_transaction_id: str
    category_id: int
    custom_tags: CustomTags | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            amount=r.number("amount"),
            user_transaction_id=str(r.raw("userTransactionId") or ""),
            category_id=r.integer("categoryId"),
            custom_tags=r.opt_object("customTags", CustomTags.from_payload),
        )


@dataclass(frozen=True, kw_only=True)
class Transaction:
    """
    A single transaction.

    ``transaction_type`` is kept as the service's display label
    ("Cash In", "401k Contribution", ...).
    """

    user_transaction_id: int
    user_account_id: int
    account_id: str
    account_name: str
    transaction_date: date
    amount: float
    description: str
    original_description: str
    status: TransactionStatus
    category_id: int
    transaction_type: str
    transaction_type_id: int | None = None
    currency: str = ""
    is_credit: bool = False
    is_income: bool = False
    is_spending: bool = False
    is_cash_in: bool = False
    is_cash_out: bool = False
    is_interest: bool = False
    is_duplicate: bool = False
    is_new: bool = False
    is_editable: bool = False
    merchant: str | None = None
    merchant_id: str | None = None
    simple_description: str | None = None
    price: float | None = None
    quantity: float | None = None
    net_cost: float | None = None
    original_amount: float | None = None
    running_balance: float | None = None
    investment_type: InvestmentType | None = None
    symbol: str | None = None
    cusip_number: str | None = None
    original_category_id: int | None = None
    has_splits: bool = False
    splits: tuple[Split, ...] = ()
    custom_tags: CustomTags | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            user_transaction_id=r.integer("userTransactionId"),
            user_account_id=r.integer("userAccountId"),
            account_id=r.string("accountId"),
            account_name=r.opt_string("accountName") or "",
            transaction_date=r.iso_date("transactionDate"),
            amount=r.number("amount"),
            description=r.opt_string("description") or "",
            original_description=r.opt_string("originalDescription") or "",
            status=r.enum("status", TransactionStatus),
            category_id=r.integer("categoryId"),
            transaction_type=r.opt_string("transactionType") or "",
            transaction_type_id=r.opt_integer("transactionTypeId"),
            currency=r.opt_string("currency") or "",
            is_credit=r.opt_boolean("isCredit") or False,
            is_income=r.opt_boolean("isIncome") or False,
            is_spending=r.opt_boolean("isSpending") or False,
            is_cash_in=r.opt_boolean("isCashIn") or False,
            is_cash_out=r.opt_boolean("isCashOut") or False,
            is_interest=r.opt_boolean("isInterest") or False,
            is_duplicate=r.opt_boolean("isDuplicate") or False,
            is_new=r.opt_boolean("isNew") or False,
            is_editable=r.opt_boolean("isEditable") or False,
            merchant=r.opt_string("merchant"),
            merchant_id=r.opt_string("merchantId"),
            simple_description=r.opt_string("simpleDescription"),
            price=r.lenient_number("price"),
            quantity=r.lenient_number("quantity"),
            net_cost=r.lenient_number("netCost"),
            original_amount=r.lenient_number("originalAmount"),
            running_balance=r.lenient_number("runningBalance"),
            investment_type=r.opt_enum("investmentType", InvestmentType),
            symbol=r.opt_string("symbol"),
            cusip_number=r.opt_string("cusipNumber"),
            original_category_id=r.opt_integer("originalCategoryId"),
            has_splits=r.opt_boolean("hasSplits") or False,
            splits=tuple(r.opt_array("splits", Split.from_payload) or ()),
            custom_tags=r.opt_object("customTags", CustomTags.from_payload),
        )

    @property
    def signed_amount(self) -> float:
        """Amount with credits positive and debits negative."""
        return self.amount if self.is_credit else -self.amount


@dataclass(frozen=True, kw_only=True)
class UserTransactions:
    """Payload of ``/api/transaction/getUserTransactions``."""

    start_date: date
    end_date: date
    transactions: tuple[Transaction, ...] = ()
    interval_type: IntervalType | None = None
    money_in: float | None = None
    money_out: float | None = None
    net_cashflow: float | None = None
    average_in: float | None = None
    average_out: float | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            start_date=r.iso_date("startDate"),
            end_date=r.iso_date("endDate"),
            transactions=tuple(r.opt_array("transactions", Transaction.from_payload) or ()),
            interval_type=r.opt_enum("intervalType", IntervalType),
            money_in=r.opt_number("moneyIn"),
            money_out=r.opt_number("moneyOut"),
            net_cashflow=r.opt_number("netCashflow"),
            average_in=r.opt_number("averageIn"),
            average_out=r.opt_number("averageOut"),
        )


@dataclass(frozen=True, kw_only=True)
class Category:
    transaction_category_id: int
    name: str
    category_type: CategoryType
    is_editable: bool = False
    is_custom: bool = False
    is_override: bool = False
    short_description: str | None = None
    transaction_category_key: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            transaction_category_id=r.integer("transactionCategoryId"),
            name=r.string("name"),
            category_type=r.enum("type", CategoryType),
            is_editable=r.opt_boolean("isEditable") or False,
            is_custom=r.opt_boolean("isCustom") or False,
            is_override=r.opt_boolean("isOverride") or False,
            short_description=r.opt_string("shortDescription"),
            transaction_category_key=r.opt_string("transactionCategoryKey"),
        )

    @classmethod
    def list_from_payload(cls, r: FieldReader) -> list[Self]:
        return r.as_list(cls.from_payload)


@dataclass(frozen=True, kw_only=True)
class Tag:
    tag_id: int
    tag_name: str

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(tag_id=r.integer("tagId"), tag_name=r.string("tagName"))

    @classmethod
    def list_from_payload(cls, r: FieldReader) -> list[Self]:
        return r.as_list(cls.from_payload)
