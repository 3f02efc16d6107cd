"""Spending summary endpoint."""

from collections.abc import Iterable

from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.spending import UserSpending
from personalcapital.models.transactions import IntervalType


async def get_user_spending(
    http: AsyncHttpClient,
    interval_types: Iterable[IntervalType] = (IntervalType.MONTH,),
    *,
    include_details: bool = True,
) -> UserSpending:
    """Get spending totals for the current period of each interval type."""
    return await http.post(
        "/api/account/getUserSpending",
        UserSpending.from_payload,
        {
            "intervalTypes": ",".join(str(t) for t in interval_types),
            "includeDetails": "true" if include_details else "false",
        },
        include_change_id=True,
    )
