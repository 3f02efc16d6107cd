"""Transaction, category and tag endpoints."""

from collections.abc import Iterable
from datetime import date

from personalcapital.api.endpoints import format_date, format_ids
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.models.transactions import Category, Tag, UserTransactions


async def get_user_transactions(
    http: AsyncHttpClient,
    start_date: date,
    end_date: date,
    user_account_ids: Iterable[int] | None = None,
) -> UserTransactions:
    """
    Get transactions between two dates (both inclusive).

    Args:
        http: Configured async HTTP client.
        start_date: First day of the range.
        end_date: Last day of the range.
        user_account_ids: Restrict to these accounts. All accounts if None.
    """
    form = {
        "startDate": format_date(start_date),
        "endDate": format_date(end_date),
    }
    if user_account_ids is not None:
        form["userAccountIds"] = format_ids(user_account_ids)
    return await http.post(
        "/api/transaction/getUserTransactions",
        UserTransactions.from_payload,
        form,
        include_change_id=True,
    )


async def get_categories(http: AsyncHttpClient) -> list[Category]:
    """Get system and user transaction categories."""
    return await http.post(
        "/api/transactioncategory/getCategories",
        Category.list_from_payload,
        include_change_id=True,
    )


async def get_tags(http: AsyncHttpClient) -> list[Tag]:
    """Get system and user transaction tags."""
    return await http.post(
        "/api/transactiontag/getTags",
        Tag.list_from_payload,
        include_change_id=True,
    )
