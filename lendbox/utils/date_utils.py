"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_from(start: date, days: int) -> date:
    return start + timedelta(days=days)


def today_from(now: datetime) -> date:
    """Midnight-normalized day used for due/overdue comparisons"""
    return now.date()
