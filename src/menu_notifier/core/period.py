"""Weekly period classification.

An item belongs to the current period when the week range embedded in its
title (``[MM/DD-MM/DD]``) starts on the current period's anchor day, or, when
the title carries no usable range, when it was published on or after the
start of the current period.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from menu_notifier.core.entities import Item

MONDAY = 0
SUNDAY = 6

RANGE_PATTERN = re.compile(r"\[(\d{1,2}/\d{1,2})-(\d{1,2}/\d{1,2})\]")


def period_start(now: datetime, anchor_weekday: int = MONDAY) -> datetime:
    """Return midnight of the most recent anchor weekday at or before ``now``."""
    if not 0 <= anchor_weekday <= 6:
        raise ValueError(f"anchor_weekday must be 0-6, got {anchor_weekday}")

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    days_since_anchor = (now.weekday() - anchor_weekday) % 7
    return midnight - timedelta(days=days_since_anchor)


def extract_range(item: Union[Item, str]) -> Optional[tuple[str, str]]:
    """Extract the ``(start, end)`` week range from a title, e.g. ``("12/22", "12/26")``."""
    title = item.title if isinstance(item, Item) else item
    match = RANGE_PATTERN.search(title or "")
    if not match:
        return None
    return match.group(1), match.group(2)


def format_range(item: Union[Item, str]) -> str:
    week_range = extract_range(item)
    if not week_range:
        return ""
    return f"{week_range[0]} ~ {week_range[1]}"


def range_start_date(item: Item, now: datetime) -> Optional[date]:
    """Start date of the title range, placed in the year nearest to ``now``.

    Returns None when the title has no range or its start is not a real date.
    """
    week_range = extract_range(item)
    if not week_range:
        return None

    month, day = (int(part) for part in week_range[0].split("/"))
    year = now.year
    # Range written in December, read in January (and the reverse).
    if now.month == 1 and month == 12:
        year -= 1
    elif now.month == 12 and month == 1:
        year += 1

    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_current_period(item: Item, now: datetime, anchor_weekday: int = MONDAY) -> bool:
    """Check whether the item is the publication for the period containing ``now``."""
    start = period_start(now, anchor_weekday)

    candidate = range_start_date(item, now)
    if candidate is not None:
        return (candidate.month, candidate.day) == (start.month, start.day)

    published_at = item.published_at
    if published_at.tzinfo is None and start.tzinfo is not None:
        published_at = published_at.replace(tzinfo=start.tzinfo)
    elif published_at.tzinfo is not None and start.tzinfo is None:
        published_at = published_at.astimezone().replace(tzinfo=None)
    return published_at >= start
