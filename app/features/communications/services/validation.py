"""Request parameter validation shared by the communication endpoints."""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from app.features.communications.domain.errors import InvalidParameter
from app.features.communications.domain.models import Granularity

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d{1,9})?Z?)?$")

CONVERSATION_TYPES = ("group", "direct")
CONVERSATION_PRIORITIES = ("high", "medium", "low")
MAX_SEARCH_QUERY_LENGTH = 200


@dataclass(frozen=True, slots=True)
class DateRange:
    date_from: str | None = None
    date_to: str | None = None

    def as_params(self) -> dict[str, str]:
        params = {}
        if self.date_from:
            params["dateFrom"] = self.date_from
        if self.date_to:
            params["dateTo"] = self.date_to
        return params


def parse_iso_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 string into an aware UTC datetime, or None."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def validate_iso_date(value: str | None, name: str) -> str | None:
    if not value:
        return None
    if not ISO_DATE_PATTERN.fullmatch(value):
        raise InvalidParameter(f"Invalid {name} format. Expected ISO 8601 format.")
    # Fractional seconds beyond microseconds are not parseable; the pattern
    # already vouches for the shape, so only the date/time part is checked.
    if parse_iso_timestamp(re.sub(r"\.\d+", "", value)) is None:
        raise InvalidParameter(f"Invalid {name} format. Date is not valid.")
    return value


def validate_date_range(date_from: str | None, date_to: str | None) -> DateRange:
    date_from = validate_iso_date(date_from, "dateFrom")
    date_to = validate_iso_date(date_to, "dateTo")

    if date_from and date_to:
        start = parse_iso_timestamp(re.sub(r"\.\d+", "", date_from))
        end = parse_iso_timestamp(re.sub(r"\.\d+", "", date_to))
        if end < start:
            raise InvalidParameter("Invalid date range: dateTo must not be before dateFrom")

    return DateRange(date_from=date_from, date_to=date_to)


def validate_granularity(value: str | None) -> Granularity:
    try:
        return Granularity(value or Granularity.DAILY.value)
    except ValueError:
        raise InvalidParameter(
            "Invalid granularity. Must be one of: daily, weekly, monthly"
        ) from None


def validate_choice(value: str | None, name: str, choices: tuple[str, ...]) -> str | None:
    if not value:
        return None
    if value not in choices:
        raise InvalidParameter(f"Invalid {name} parameter. Must be one of: {', '.join(choices)}")
    return value


def validate_search_query(query: str | None) -> str:
    trimmed = (query or "").strip()
    if not trimmed:
        raise InvalidParameter("Query parameter is required")
    if len(trimmed) > MAX_SEARCH_QUERY_LENGTH:
        raise InvalidParameter(
            f"Query parameter must not exceed {MAX_SEARCH_QUERY_LENGTH} characters"
        )
    return trimmed
