"""
Investment holdings models (``/api/invest/getHoldings``).
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Self

from personalcapital.models.reader import FieldReader


class HoldingType(StrEnum):
    CASH = "Cash"
    ETF = "ETF"
    FUND = "Fund"
    OTHER = "Other"
    STOCK = "Stock"


class HoldingSource(StrEnum):
    PCAP = "PCAP"
    USER = "USER"
    YODLEE = "YODLEE"


class PriceSource(StrEnum):
    MARKET = "MARKET"
    PARTNER = "PARTNER"
    USER = "USER"


class ManualClassification(StrEnum):
    RESTRICTED = "RESTRICTED"
    UNCLASSIFIED = "UNCLASSIFIED"


@dataclass(frozen=True, kw_only=True)
class Holding:
    user_account_id: int
    quantity: float
    price: float
    value: float
    holding_type: HoldingType
    source: HoldingSource
    price_source: PriceSource | None = None
    manual_classification: ManualClassification | None = None
    ticker: str | None = None
    cusip: str | None = None
    description: str | None = None
    account_name: str | None = None
    exchange: str | None = None
    fund_type: str | None = None
    currency: str | None = None
    holding_percentage: float | None = None
    one_day_percent_change: float | None = None
    one_day_value_change: float | None = None
    change: float | None = None
    cost_basis: float | None = None
    tax_cost: float | None = None
    fund_fees: float | None = None
    fees_per_year: float | None = None
    source_asset_id: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            user_account_id=r.integer("userAccountId"),
            quantity=r.number("quantity"),
            price=r.number("price"),
            value=r.number("value"),
            holding_type=r.enum("holdingType", HoldingType),
            source=r.enum("source", HoldingSource),
            price_source=r.opt_enum("priceSource", PriceSource),
            manual_classification=r.opt_enum("manualClassification", ManualClassification),
            ticker=r.opt_string("ticker"),
            cusip=r.opt_string("cusip"),
            description=r.opt_string("description"),
            account_name=r.opt_string("accountName"),
            exchange=r.opt_string("exchange"),
            fund_type=r.opt_string("type"),
            currency=r.opt_string("currency"),
            holding_percentage=r.opt_number("holdingPercentage"),
            one_day_percent_change=r.opt_number("oneDayPercentChange"),
            one_day_value_change=r.opt_number("oneDayValueChange"),
            change=r.opt_number("change"),
            cost_basis=r.opt_number("costBasis"),
            tax_cost=r.opt_number("taxCost"),
            fund_fees=r.opt_number("fundFees"),
            fees_per_year=r.opt_number("feesPerYear"),
            source_asset_id=r.opt_string("sourceAssetId"),
        )


@dataclass(frozen=True, kw_only=True)
class Holdings:
    holdings: tuple[Holding, ...]
    holdings_total_value: float
    classifications: tuple[Any, ...] = ()

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            holdings=tuple(r.array("holdings", Holding.from_payload)),
            holdings_total_value=r.number("holdingsTotalValue"),
            classifications=tuple(r.raw("classifications") or ()),
        )
