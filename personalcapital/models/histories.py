"""
Balance and net worth history models (``/api/account/getHistories``).
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Self

from personalcapital.models.reader import FieldReader
from personalcapital.models.transactions import IntervalType


class HistoryType(StrEnum):
    """Series that can be requested from getHistories."""

    BALANCES = "balances"
    NETWORTH = "networth"
    DAILY_CHANGE_AMOUNT = "dailychangeamount"
    ONE_DAY_SUMMARIES = "oneDaySummaries"
    CASH_FLOWS = "cashflows"


@dataclass(frozen=True, kw_only=True)
class Cashflow:
    income: float
    expense: float
    cash_in: float
    cash_out: float

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            income=r.number("income"),
            expense=r.number("expense"),
            cash_in=r.number("cashIn"),
            cash_out=r.number("cashOut"),
        )


@dataclass(frozen=True, kw_only=True)
class History:
    """
    One day of history.

    ``balances`` maps user account ids to balances; the service sends some
    of them as strings, which are kept as-is.
    """

    date: str
    aggregate_balance: float | None = None
    balances: dict[str, float | str] = field(default_factory=dict)
    daily_change_amount: dict[str, float] | None = None
    cashflows: dict[str, Cashflow] | None = None
    aggregate_daily_change_amount: float | None = None
    aggregate_cash_in: float | None = None
    aggregate_cash_out: float | None = None
    aggregate_income: float | None = None
    aggregate_expense: float | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            date=r.string("date"),
            aggregate_balance=r.opt_number("aggregateBalance"),
            balances=r.opt_mapping("balances", FieldReader.as_number_or_string) or {},
            daily_change_amount=r.opt_mapping("dailyChangeAmount", FieldReader.as_number),
            cashflows=r.opt_mapping("cashflows", Cashflow.from_payload),
            aggregate_daily_change_amount=r.opt_number("aggregateDailyChangeAmount"),
            aggregate_cash_in=r.opt_number("aggregateCashIn"),
            aggregate_cash_out=r.opt_number("aggregateCashOut"),
            aggregate_income=r.opt_number("aggregateIncome"),
            aggregate_expense=r.opt_number("aggregateExpense"),
        )


@dataclass(frozen=True, kw_only=True)
class NetworthHistory:
    date: str
    networth: float
    total_assets: float
    total_liabilities: float
    total_cash: float | None = None
    total_investment: float | None = None
    total_credit: float | None = None
    total_loan: float | None = None
    total_mortgage: float | None = None
    total_other_assets: float | None = None
    total_other_liabilities: float | None = None
    one_day_networth_change: float | None = None
    one_day_networth_percentage_change: float | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            date=r.string("date"),
            networth=r.number("networth"),
            total_assets=r.number("totalAssets"),
            total_liabilities=r.number("totalLiabilities"),
            total_cash=r.opt_number("totalCash"),
            total_investment=r.opt_number("totalInvestment"),
            total_credit=r.opt_number("totalCredit"),
            total_loan=r.opt_number("totalLoan"),
            total_mortgage=r.opt_number("totalMortgage"),
            total_other_assets=r.opt_number("totalOtherAssets"),
            total_other_liabilities=r.opt_number("totalOtherLiabilities"),
            one_day_networth_change=r.opt_number("oneDayNetworthChange"),
            one_day_networth_percentage_change=r.opt_number("oneDayNetworthPercentageChange"),
        )


@dataclass(frozen=True, kw_only=True)
class AccountSummary:
    user_account_id: int
    account_name: str
    site_name: str | None = None
    current_balance: float | None = None
    balance_as_of_end_date: float | None = None
    income: float | None = None
    expense: float | None = None
    cash_flow: float | None = None
    percent_of_total: float | None = None
    date_range_balance_value_change: float | None = None
    date_range_balance_percentage_change: float | None = None
    date_range_performance_value_change: float | None = None
    one_day_balance_value_change: float | None = None
    one_day_balance_percentage_change: float | None = None
    one_day_performance_value_change: float | None = None
    closed_date: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            user_account_id=r.integer("userAccountId"),
            account_name=r.string("accountName"),
            site_name=r.opt_string("siteName"),
            current_balance=r.opt_number("currentBalance"),
            balance_as_of_end_date=r.opt_number("balanceAsOfEndDate"),
            income=r.opt_number("income"),
            expense=r.opt_number("expense"),
            cash_flow=r.opt_number("cashFlow"),
            percent_of_total=r.opt_number("percentOfTotal"),
            date_range_balance_value_change=r.opt_number("dateRangeBalanceValueChange"),
            date_range_balance_percentage_change=r.opt_number(
                "dateRangeBalancePercentageChange"
            ),
            date_range_performance_value_change=r.opt_number("dateRangePerformanceValueChange"),
            one_day_balance_value_change=r.opt_number("oneDayBalanceValueChange"),
            one_day_balance_percentage_change=r.opt_number("oneDayBalancePercentageChange"),
            one_day_performance_value_change=r.opt_number("oneDayPerformanceValueChange"),
            closed_date=r.opt_string("closedDate") or None,
        )


@dataclass(frozen=True, kw_only=True)
class OneDaySummaries:
    aggregated_one_day_percentage_change: float
    aggregated_one_day_value_change: float

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            aggregated_one_day_percentage_change=r.number("aggregatedOneDayPercentageChange"),
            aggregated_one_day_value_change=r.number("aggregatedOneDayValueChange"),
        )


@dataclass(frozen=True, kw_only=True)
class Histories:
    """Payload of getHistories. Each series is present only if it was requested."""

    interval_type: IntervalType | None = None
    histories: tuple[History, ...] | None = None
    networth_histories: tuple[NetworthHistory, ...] | None = None
    account_summaries: tuple[AccountSummary, ...] | None = None
    one_day_summaries: OneDaySummaries | None = None
    networth_summary: dict[str, float] | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        histories = r.opt_array("histories", History.from_payload)
        networth = r.opt_array("networthHistories", NetworthHistory.from_payload)
        summaries = r.opt_array("accountSummaries", AccountSummary.from_payload)
        return cls(
            interval_type=r.opt_enum("intervalType", IntervalType),
            histories=tuple(histories) if histories is not None else None,
            networth_histories=tuple(networth) if networth is not None else None,
            account_summaries=tuple(summaries) if summaries is not None else None,
            one_day_summaries=r.opt_object("oneDaySummaries", OneDaySummaries.from_payload),
            networth_summary=r.opt_mapping("networthSummary", FieldReader.as_number),
        )
