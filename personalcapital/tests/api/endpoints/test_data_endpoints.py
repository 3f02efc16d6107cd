"""Tests for account, transaction, spending, holdings and history bindings."""

import json
from datetime import date

import pytest

from personalcapital.api.endpoints import accounts, histories, holdings, spending, transactions
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.histories import HistoryType
from personalcapital.models.transactions import IntervalType
from personalcapital.tests.utils.transport import MockTransport, form_of


@pytest.mark.asyncio
async def test_get_accounts(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_envelope({"accounts": [], "networth": 1250.5})

    result = await accounts.get_accounts(http)

    assert result.accounts == ()
    assert result.networth == 1250.5
    request = mock_transport.requests[0]
    assert request.url.path == "/api/newaccount/getAccounts2"
    assert form_of(request)["lastServerChangeId"] == "-1"


@pytest.mark.asyncio
async def test_get_user_transactions_sends_range_and_accounts(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        {"startDate": "2024-01-01", "endDate": "2024-01-31", "transactions": []}
    )

    await transactions.get_user_transactions(
        http, date(2024, 1, 1), date(2024, 1, 31), user_account_ids=[11, 12]
    )

    request = mock_transport.requests[0]
    assert request.url.path == "/api/transaction/getUserTransactions"
    form = form_of(request)
    assert form["startDate"] == "2024-01-01"
    assert form["endDate"] == "2024-01-31"
    assert json.loads(form["userAccountIds"]) == [11, 12]


@pytest.mark.asyncio
async def test_get_user_transactions_omits_accounts_by_default(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        {"startDate": "2024-01-01", "endDate": "2024-01-31", "transactions": []}
    )

    await transactions.get_user_transactions(http, date(2024, 1, 1), date(2024, 1, 31))

    assert "userAccountIds" not in form_of(mock_transport.requests[0])


@pytest.mark.asyncio
async def test_get_categories_and_tags(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        [{"transactionCategoryId": 1, "name": "Groceries", "type": "EXPENSE"}]
    )
    mock_transport.add_envelope([{"tagId": 7, "tagName": "Trip", "isCustom": True}])

    categories = await transactions.get_categories(http)
    tags = await transactions.get_tags(http)

    assert [c.name for c in categories] == ["Groceries"]
    assert [t.tag_name for t in tags] == ["Trip"]
    assert mock_transport.requests[0].url.path == "/api/transactioncategory/getCategories"
    assert mock_transport.requests[1].url.path == "/api/transactiontag/getTags"


@pytest.mark.asyncio
async def test_get_user_spending(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_envelope(
        {"intervals": [{"type": "MONTH", "current": 420.0, "average": 380.0, "details": []}]}
    )

    result = await spending.get_user_spending(http, [IntervalType.MONTH, IntervalType.YEAR])

    assert result.interval(IntervalType.MONTH).current == 420.0
    form = form_of(mock_transport.requests[0])
    assert form["intervalTypes"] == "MONTH,YEAR"
    assert form["includeDetails"] == "true"
    assert form["lastServerChangeId"] == "-1"


@pytest.mark.asyncio
async def test_get_holdings(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_envelope({"holdings": [], "holdingsTotalValue": 0})

    result = await holdings.get_holdings(http, [5])

    assert result.holdings_total_value == 0.0
    request = mock_transport.requests[0]
    assert request.url.path == "/api/invest/getHoldings"
    assert json.loads(form_of(request)["userAccountIds"]) == [5]


@pytest.mark.asyncio
async def test_get_histories(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_envelope(
        {"intervalType": "DAY", "histories": [{"date": "2024-01-02", "aggregateBalance": 10}]}
    )

    result = await histories.get_histories(
        http,
        date(2024, 1, 1),
        date(2024, 1, 2),
        [HistoryType.BALANCES, HistoryType.NETWORTH],
    )

    assert result.interval_type == IntervalType.DAY
    assert result.histories[0].aggregate_balance == 10.0
    form = form_of(mock_transport.requests[0])
    assert form["interval"] == "DAY"
    assert json.loads(form["types"]) == ["balances", "networth"]
