"""
Page window computation and the count/data query pair behind every listing.

Two validation policies exist and are chosen per endpoint:

- LENIENT: a page below 1 falls back to 1 and a limit below 1 is clamped to 1
- STRICT: a numeric page or limit below 1 is rejected with InvalidParameter

Under both policies a missing or non-numeric value takes the default and a
limit above the endpoint maximum is clamped down to it. A page so far out that
its offset exceeds what the store can address is rejected under both.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.db.neo4j import execute_read_query, run_concurrently
from app.features.communications.domain.errors import InvalidParameter, QueryFailed
from app.features.communications.domain.models import PaginationInfo
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE = 1
# Largest SKIP the store accepts (signed 64-bit)
MAX_SKIP = 2**63 - 1


class PaginationPolicy(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True, slots=True)
class PageWindow:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def info(self, total: int) -> PaginationInfo:
        return PaginationInfo(
            page=self.page,
            limit=self.limit,
            total=total,
            total_pages=total_pages(total, self.limit),
        )


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); zero exactly when total is zero."""
    if total <= 0:
        return 0
    return math.ceil(total / limit)


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def compute_window(
    page_param: Any,
    limit_param: Any,
    *,
    max_limit: int,
    default_limit: int,
    policy: PaginationPolicy = PaginationPolicy.LENIENT,
    context: str | None = None,
) -> PageWindow:
    page = _parse_int(page_param)
    limit = _parse_int(limit_param)

    if page is None:
        page = DEFAULT_PAGE
    elif page < 1:
        if policy is PaginationPolicy.STRICT:
            raise InvalidParameter("Invalid page number")
        logger.info("Invalid page parameter, using default", page=page_param, context=context)
        page = DEFAULT_PAGE

    if limit is None:
        limit = default_limit
    elif limit < 1:
        if policy is PaginationPolicy.STRICT:
            raise InvalidParameter("Invalid limit value")
        limit = 1

    if limit > max_limit:
        logger.info("Limit exceeds maximum, capping", limit=limit, max_limit=max_limit, context=context)
        limit = max_limit

    window = PageWindow(page=page, limit=limit)
    if window.skip > MAX_SKIP:
        raise InvalidParameter("Invalid page number")
    return window


def read_count(records: list[dict[str, Any]], field: str = "total", *, operation: str) -> int:
    """
    Extract the count from a count query.

    No record at all means the query itself was malformed and is a failure.
    A record whose value is null is read as zero.
    """
    if not records:
        raise QueryFailed(
            operation,
            LookupError("Count query returned no records"),
            message="Count query returned no records",
        )

    value = records[0].get(field)
    if value is None:
        logger.debug("Count query returned null, treating as zero", operation=operation)
        return 0
    return int(value)


async def fetch_page(
    count_query: str,
    data_query: str,
    params: dict[str, Any],
    window: PageWindow,
    *,
    operation: str,
    count_field: str = "total",
    skip_data_when_empty: bool = False,
) -> tuple[int, list[dict[str, Any]]]:
    """
    Run the count query and the page-window data query.

    The data query must apply `SKIP $skip LIMIT $limit` before any per-row
    aggregation. By default both queries run concurrently; with
    `skip_data_when_empty` the count runs first and an empty result skips the
    data query.
    """
    data_params = {**params, "skip": window.skip, "limit": window.limit}

    if skip_data_when_empty:
        count_records = await execute_read_query(count_query, params, operation=f"{operation}.count")
        total = read_count(count_records, count_field, operation=operation)
        if total == 0:
            return 0, []
        rows = await execute_read_query(data_query, data_params, operation=f"{operation}.data")
        return total, rows

    count_records, rows = await run_concurrently(
        execute_read_query(count_query, params, operation=f"{operation}.count"),
        execute_read_query(data_query, data_params, operation=f"{operation}.data"),
    )
    return read_count(count_records, count_field, operation=operation), rows
