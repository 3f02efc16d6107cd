"""Balance and net worth history endpoint."""

import json
from collections.abc import Iterable
from datetime import date

from personalcapital.api.endpoints import format_date, format_ids
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.histories import Histories, HistoryType
from personalcapital.models.transactions import IntervalType


async def get_histories(
    http: AsyncHttpClient,
    start_date: date,
    end_date: date,
    types: Iterable[HistoryType],
    interval: IntervalType = IntervalType.DAY,
    user_account_ids: Iterable[int] | None = None,
) -> Histories:
    """
    Get history series between two dates.

    Args:
        http: Configured async HTTP client.
        start_date: First day of the range.
        end_date: Last day of the range.
        types: Series to include in the response.
        interval: Sampling interval of the series.
        user_account_ids: Restrict to these accounts. All accounts if None.
    """
    form = {
        "startDate": format_date(start_date),
        "endDate": format_date(end_date),
        "interval": str(interval),
        "types": json.dumps([str(t) for t in types]),
    }
    if user_account_ids is not None:
        form["userAccountIds"] = format_ids(user_account_ids)
    return await http.post("/api/account/getHistories", Histories.from_payload, form)
