"""
Temporal Phrase Extraction

Detects relative time phrases ("tomorrow", "last week", ...) in a search
query and turns them into an inclusive date window, so the search can be
narrowed to records dated inside it.

Rules:
- Phrases are checked in a fixed order; the first match wins
- Windows are whole local days: 00:00:00.000 to 23:59:59.999
- Weeks run Sunday to Saturday
- Months run from the 1st to the last calendar day
- The matched phrase is removed from the query so it does not skew the
  embedding ("what did I do last week" -> "what did I do")
"""

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from integral_assistant.models.retrieval import TemporalIntent, TemporalType


DayRange = tuple[date, date]


def _week_start(today: date) -> date:
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday starts the week
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _month_range(year: int, month: int) -> DayRange:
    if month < 1:
        year, month = year - 1, 12
    elif month > 12:
        year, month = year + 1, 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _single_day(offset: int) -> Callable[[date], DayRange]:
    def compute(today: date) -> DayRange:
        day = today + timedelta(days=offset)
        return day, day
    return compute


def _week(offset_weeks: int) -> Callable[[date], DayRange]:
    def compute(today: date) -> DayRange:
        start = _week_start(today) + timedelta(weeks=offset_weeks)
        return start, start + timedelta(days=6)
    return compute


def _month(offset_months: int) -> Callable[[date], DayRange]:
    def compute(today: date) -> DayRange:
        return _month_range(today.year, today.month + offset_months)
    return compute


# Order matters: first match wins.
TEMPORAL_PATTERNS: list[tuple[re.Pattern, TemporalType, Callable[[date], DayRange]]] = [
    (re.compile(r"\b(today|tonight)\b", re.IGNORECASE), TemporalType.TODAY, _single_day(0)),
    (re.compile(r"\btomorrow\b", re.IGNORECASE), TemporalType.TOMORROW, _single_day(1)),
    (re.compile(r"\byesterday\b", re.IGNORECASE), TemporalType.YESTERDAY, _single_day(-1)),
    (re.compile(r"\bthis week\b", re.IGNORECASE), TemporalType.THIS_WEEK, _week(0)),
    (re.compile(r"\bnext week\b", re.IGNORECASE), TemporalType.NEXT_WEEK, _week(1)),
    (re.compile(r"\blast week\b", re.IGNORECASE), TemporalType.LAST_WEEK, _week(-1)),
    (re.compile(r"\bthis month\b", re.IGNORECASE), TemporalType.THIS_MONTH, _month(0)),
    (re.compile(r"\bnext month\b", re.IGNORECASE), TemporalType.NEXT_MONTH, _month(1)),
    (re.compile(r"\blast month\b", re.IGNORECASE), TemporalType.LAST_MONTH, _month(-1)),
]

_WHITESPACE = re.compile(r"\s+")


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    # 23:59:59.999, millisecond precision
    return datetime.combine(day, time(23, 59, 59, 999000))


def extract_temporal_intent(query: str, now: Optional[datetime] = None) -> TemporalIntent:
    """
    Find the time window a query refers to.

    Args:
        query: Raw user query
        now: Reference time (defaults to the local current time)

    Returns:
        TemporalIntent; type NONE with no dates and the query unchanged
        when no phrase matches
    """
    today = (now or datetime.now()).date()

    for pattern, temporal_type, compute_range in TEMPORAL_PATTERNS:
        if pattern.search(query):
            start, end = compute_range(today)
            cleaned = _WHITESPACE.sub(" ", pattern.sub("", query)).strip()
            return TemporalIntent(
                type=temporal_type,
                start_date=start_of_day(start),
                end_date=end_of_day(end),
                original_query=query,
                cleaned_query=cleaned,
            )

    return TemporalIntent(
        type=TemporalType.NONE,
        original_query=query,
        cleaned_query=query,
    )


def _format_day(day: date, current_year: int) -> str:
    text = f"{day:%b} {day.day}"
    if day.year != current_year:
        text += f", {day.year}"
    return text


def format_date_range(
    start: Optional[datetime],
    end: Optional[datetime],
    now: Optional[datetime] = None,
) -> str:
    """
    Human-readable window for prompts, e.g. "Oct 12 - Oct 18".

    A single-day window renders as one date. The year is shown only for
    dates outside the current year. Empty string if either end is missing.
    """
    if start is None or end is None:
        return ""
    current_year = (now or datetime.now()).year
    if start.date() == end.date():
        return _format_day(start.date(), current_year)
    return f"{_format_day(start.date(), current_year)} - {_format_day(end.date(), current_year)}"
