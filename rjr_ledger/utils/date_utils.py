"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo
from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month (Jan 31 + 1 -> Feb 28/29)"""
    return from_date + relativedelta(months=months)


def format_br_date(value: Optional[date]) -> str:
    """Render dd/mm/yyyy, or '-' when missing"""
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")


def today_in(timezone: str) -> date:
    """Current calendar date in the given IANA timezone"""
    return datetime.now(ZoneInfo(timezone)).date()
