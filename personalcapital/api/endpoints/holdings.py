"""Investment holdings endpoint."""

from collections.abc import Iterable

from personalcapital.api.endpoints import format_ids
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.holdings import Holdings


async def get_holdings(
    http: AsyncHttpClient,
    user_account_ids: Iterable[int] | None = None,
) -> Holdings:
    """Get holdings across investment accounts, or only the given ones."""
    form = {}
    if user_account_ids is not None:
        form["userAccountIds"] = format_ids(user_account_ids)
    return await http.post("/api/invest/getHoldings", Holdings.from_payload, form)
