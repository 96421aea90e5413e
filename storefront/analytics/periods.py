"""
Reporting Windows

Resolves named periods ("today", "last-week", "quarterly", ...) and custom
start/end inputs into inclusive ``DateRange`` windows relative to a reference
time.
"""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

from storefront.data.models import DateRange, as_naive_local
from storefront.exceptions import InvalidRangeError

DateInput = Union[str, date, datetime]


class SalesPeriod(str, Enum):
    """Look-back periods for sales data queries"""
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_WEEK = "last-week"
    LAST_MONTH = "last-month"
    CUSTOM = "custom"


class ReportType(str, Enum):
    """Calendar windows for revenue reports"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class TimeGrouping(str, Enum):
    """Bucket size for revenue time series"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def start_of_week(moment: datetime) -> datetime:
    """Midnight of the Sunday that starts the calendar week containing ``moment``"""
    # weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (moment.weekday() + 1) % 7
    return start_of_day(moment) - timedelta(days=days_since_sunday)


def start_of_month(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1)


def end_of_month(moment: datetime) -> datetime:
    if moment.month == 12:
        first_of_next = datetime(moment.year + 1, 1, 1)
    else:
        first_of_next = datetime(moment.year, moment.month + 1, 1)
    return first_of_next - timedelta(microseconds=1)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by whole months, clamping the day to the target month"""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = end_of_month(datetime(year, month, 1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def bucket_start(moment: datetime, grouping: TimeGrouping) -> datetime:
    """Start of the day, Sunday-based week or month containing ``moment``"""
    if grouping is TimeGrouping.WEEK:
        return start_of_week(moment)
    if grouping is TimeGrouping.MONTH:
        return start_of_month(moment)
    return start_of_day(moment)


def next_bucket(start: datetime, grouping: TimeGrouping) -> datetime:
    if grouping is TimeGrouping.WEEK:
        return start + timedelta(days=7)
    if grouping is TimeGrouping.MONTH:
        return shift_months(start, 1)
    return start + timedelta(days=1)


def bucket_label(start: datetime, grouping: TimeGrouping) -> str:
    """``YYYY-MM`` for months, otherwise the ISO date the bucket starts on"""
    if grouping is TimeGrouping.MONTH:
        return start.strftime("%Y-%m")
    return start.date().isoformat()


def parse_bound(value: DateInput, field: str, end: bool = False) -> datetime:
    """
    Parse a custom range bound.

    Date-only values (``date`` objects or ``YYYY-MM-DD`` strings) resolve to
    the start of that day, or to its last microsecond when ``end`` is set.
    Timezone-aware values are converted to naive local time.
    """
    if isinstance(value, datetime):
        return as_naive_local(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end else time.min)

    text = str(value).strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end else time.min)
        return as_naive_local(datetime.fromisoformat(text))
    except ValueError:
        raise InvalidRangeError(
            f"Invalid {field} '{value}'. Use YYYY-MM-DD or an ISO timestamp.",
            value=value,
        ) from None


def custom_range(start: Optional[DateInput], end: Optional[DateInput]) -> DateRange:
    if start is None or end is None:
        raise InvalidRangeError("Start date and end date are required for custom periods")
    return DateRange(parse_bound(start, "start date"), parse_bound(end, "end date", end=True))


def resolve_sales_period(
    period: Union[SalesPeriod, str],
    now: datetime,
    start: Optional[DateInput] = None,
    end: Optional[DateInput] = None,
) -> DateRange:
    """Window for a sales data query"""
    period = coerce_enum(SalesPeriod, period)
    today = start_of_day(now)

    if period is SalesPeriod.TODAY:
        return DateRange(today, now)
    if period is SalesPeriod.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return DateRange(yesterday, end_of_day(yesterday))
    if period is SalesPeriod.LAST_WEEK:
        return DateRange(today - timedelta(days=7), now)
    if period is SalesPeriod.LAST_MONTH:
        return DateRange(shift_months(today, -1), now)
    return custom_range(start, end)


def resolve_report_window(
    report_type: Union[ReportType, str],
    now: datetime,
    start: Optional[DateInput] = None,
    end: Optional[DateInput] = None,
) -> DateRange:
    """Window for a revenue report"""
    report_type = coerce_enum(ReportType, report_type)

    if report_type is ReportType.DAILY:
        return DateRange(start_of_day(now), end_of_day(now))
    if report_type is ReportType.WEEKLY:
        return DateRange(now - timedelta(days=7), now)
    if report_type is ReportType.MONTHLY:
        return DateRange(start_of_month(now), end_of_month(now))
    if report_type is ReportType.QUARTERLY:
        first_month = (now.month - 1) // 3 * 3 + 1
        quarter_start = datetime(now.year, first_month, 1)
        return DateRange(quarter_start, end_of_month(shift_months(quarter_start, 2)))
    if report_type is ReportType.YEARLY:
        return DateRange(datetime(now.year, 1, 1), end_of_day(datetime(now.year, 12, 31)))
    return custom_range(start, end)


def previous_window(window: DateRange) -> DateRange:
    """Window of the same length ending just before ``window`` starts"""
    prev_end = window.start - timedelta(microseconds=1)
    return DateRange(prev_end - window.duration, prev_end)


def coerce_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRangeError(f"Invalid period '{value}'. Use one of: {allowed}", value=value) from None
