"""
Account models (``/api/newaccount/getAccounts2``).
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Self

from personalcapital.models.reader import FieldReader


class ProductType(StrEnum):
    NONE = ""
    BANK = "BANK"
    CREDIT_CARD = "CREDIT_CARD"
    INVESTMENT = "INVESTMENT"
    LOAN = "LOAN"
    MORTGAGE = "MORTGAGE"
    OTHER_ASSETS = "OTHER_ASSETS"
    OTHER_LIABILITIES = "OTHER_LIABILITIES"


class AccountTypeNew(StrEnum):
    NONE = ""
    INVESTMENT = "INVESTMENT"
    IRA = "IRA"
    RETIREMENT_401K = "401K"
    EDUCATIONAL_529 = "529"
    PERSONAL = "PERSONAL"
    MORTGAGE = "MORTGAGE"
    MONEY_MARKET = "MMA"
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    ESPP = "ESPP"
    ESOP = "ESOP"
    CRYPTO_CURRENCY = "CRYPTO_CURRENCY"


class AccountTypeSubtype(StrEnum):
    NONE = ""
    ROTH = "ROTH"
    TRADITIONAL = "TRADITIONAL"


class AccountTypeGroup(StrEnum):
    NONE = ""
    BANK = "BANK"
    CREDIT_CARD = "CREDIT_CARD"
    RETIREMENT = "RETIREMENT"
    INVESTMENT = "INVESTMENT"
    MORTGAGE = "MORTGAGE"
    EDUCATIONAL = "EDUCATIONAL"
    ESOP = "ESOP"
    ESPP = "ESPP"
    CRYPTO_CURRENCY = "CRYPTO_CURRENCY"


@dataclass(frozen=True, kw_only=True)
class Account:
    """
    A linked account.

    Only the fields observed to be useful are modeled. ``account_type`` is
    kept as free text because the service uses dozens of display labels
    ("IRA - Roth", "401K, Former Employer", ...).
    """

    user_account_id: int
    account_id: str
    name: str
    firm_name: str
    product_type: ProductType
    account_type: str = ""
    account_type_new: AccountTypeNew = AccountTypeNew.NONE
    account_type_subtype: AccountTypeSubtype = AccountTypeSubtype.NONE
    account_type_group: AccountTypeGroup = AccountTypeGroup.NONE
    balance: float | None = None
    current_balance: float | None = None
    available_cash: float | None = None
    credit_limit: float | None = None
    currency: str | None = None
    is_asset: bool = False
    is_liability: bool = False
    is_manual: bool = False
    is_closed: bool = False
    is_exclude_from_household: bool = False
    is_esog: bool = False
    site_id: int | None = None
    user_product_id: int | None = None
    original_name: str | None = None
    account_number: str | None = None
    last_refreshed: datetime | None = None
    created_date: datetime | None = None
    closed_date: date | None = None
    oldest_transaction_date: date | None = None
    advisory_fee_percentage: float | None = None
    interest_rate: float | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            user_account_id=r.integer("userAccountId"),
            account_id=r.string("accountId"),
            name=r.string("name"),
            firm_name=r.opt_string("firmName") or "",
            product_type=r.enum("productType", ProductType, ProductType.NONE),
            account_type=r.opt_string("accountType") or "",
            account_type_new=r.enum("accountTypeNew", AccountTypeNew, AccountTypeNew.NONE),
            account_type_subtype=r.enum(
                "accountTypeSubtype", AccountTypeSubtype, AccountTypeSubtype.NONE
            ),
            account_type_group=r.enum("accountTypeGroup", AccountTypeGroup, AccountTypeGroup.NONE),
            balance=r.opt_number("balance"),
            current_balance=r.opt_number("currentBalance"),
            available_cash=r.lenient_number("availableCash"),
            credit_limit=r.lenient_number("creditLimit"),
            currency=r.opt_string("currency"),
            is_asset=r.opt_boolean("isAsset") or False,
            is_liability=r.opt_boolean("isLiability") or False,
            is_manual=r.opt_boolean("isManual") or False,
            is_closed=r.opt_iso_date("closedDate") is not None,
            is_exclude_from_household=r.opt_boolean("isExcludeFromHousehold") or False,
            is_esog=r.opt_boolean("isEsog") or False,
            site_id=r.opt_integer("siteId"),
            user_product_id=r.opt_integer("userProductId"),
            original_name=r.opt_string("originalName"),
            account_number=r.opt_string("accountNumber"),
            last_refreshed=r.timestamp_ms("lastRefreshed"),
            created_date=r.timestamp_ms("createdDate"),
            closed_date=r.opt_iso_date("closedDate"),
            oldest_transaction_date=r.opt_iso_date("oldestTransactionDate"),
            advisory_fee_percentage=r.opt_number("advisoryFeePercentage"),
            interest_rate=r.opt_number("interestRate"),
        )


@dataclass(frozen=True, kw_only=True)
class Accounts:
    """Accounts list plus the per-category totals."""

    accounts: tuple[Account, ...]
    networth: float | None = None
    assets: float | None = None
    liabilities: float | None = None
    cash_accounts_total: float | None = None
    investment_accounts_total: float | None = None
    credit_card_accounts_total: float | None = None
    mortgage_accounts_total: float | None = None
    loan_accounts_total: float | None = None
    other_asset_accounts_total: float | None = None
    other_liabilities_accounts_total: float | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            accounts=tuple(r.array("accounts", Account.from_payload)),
            networth=r.opt_number("networth"),
            assets=r.opt_number("assets"),
            liabilities=r.opt_number("liabilities"),
            cash_accounts_total=r.opt_number("cashAccountsTotal"),
            investment_accounts_total=r.opt_number("investmentAccountsTotal"),
            credit_card_accounts_total=r.opt_number("creditCardAccountsTotal"),
            mortgage_accounts_total=r.opt_number("mortgageAccountsTotal"),
            loan_accounts_total=r.opt_number("loanAccountsTotal"),
            other_asset_accounts_total=r.opt_number("otherAssetAccountsTotal"),
            other_liabilities_accounts_total=r.opt_number("otherLiabilitiesAccountsTotal"),
        )

    def get(self, user_account_id: int) -> Account | None:
        """Find an account by its user account id."""
        for account in self.accounts:
            if account.user_account_id == user_account_id:
                return account
        return None
