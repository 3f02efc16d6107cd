"""Account endpoints."""

from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.accounts import Accounts


async def get_accounts(http: AsyncHttpClient) -> Accounts:
    """Get every linked account with its balances and totals."""
    return await http.post(
        "/api/newaccount/getAccounts2",
        Accounts.from_payload,
        include_change_id=True,
    )
