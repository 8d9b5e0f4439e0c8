"""Retention tier calculation for stored agreement PDFs.

The retention clock starts on the first day of the month after processing
time, not on the agreement's own start date, so the same agreement processed
on different days can land in different tiers. The function is pure in
``(now, end_date, policy)``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from agreements_pdf.models.settings import RetentionPolicy

EndDate = Union[date, datetime, str, None]


def start_of_next_month(now: datetime) -> date:
    """Return the first day of the calendar month following ``now``."""
    if now.month == 12:
        return date(now.year + 1, 1, 1)
    return date(now.year, now.month + 1, 1)


def whole_years_between(start: date, end: date) -> int:
    """Full calendar years elapsed from ``start`` to ``end``.

    Partial years are dropped; the result is truncated toward zero so an end
    date before ``start`` yields a negative count only once a full year has
    passed.
    """
    sign = 1
    if end < start:
        start, end = end, start
        sign = -1
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return sign * years


def parse_end_date(value: EndDate) -> Optional[date]:
    """Coerce an end date field into a ``date``; None when absent or invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def total_retention_years(end_date: date, policy: RetentionPolicy, now: datetime) -> int:
    return whole_years_between(start_of_next_month(now), end_date) + policy.base_years


def select_retention_prefix(total_years: int, policy: RetentionPolicy) -> str:
    if total_years <= policy.base_threshold:
        return policy.base_prefix
    if total_years <= policy.extended_threshold:
        return policy.extended_prefix
    return policy.maximum_prefix


def calculate_retention_period(
    end_date: EndDate,
    policy: Optional[RetentionPolicy] = None,
    now: Optional[datetime] = None,
) -> str:
    """Map an agreement end date to its S3 retention prefix.

    Unknown or unparseable end dates fall into the maximum tier.
    """
    policy = policy or RetentionPolicy()
    parsed = parse_end_date(end_date)
    if parsed is None:
        return policy.maximum_prefix
    current = now or datetime.now(timezone.utc)
    return select_retention_prefix(total_retention_years(parsed, policy, current), policy)
