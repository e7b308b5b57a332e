# backend/coercion.py
"""
Conversions between wire-shaped values and the forms the store keeps:
calendar dates, fixed-point currency and "HH:MM" times of day.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
# NUMERIC(10, 2): eight whole digits and cents
MONEY_DIGITS = 10
MONEY_PLACES = 2
MINUTES_PER_DAY = 24 * 60


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every created_at/updated_at column holds"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def localnow() -> datetime:
    """Naive wall-clock time of the server, which decides what "today" is"""
    return datetime.now()


def local_to_utc(value: datetime) -> datetime:
    """Naive server-local time as the naive UTC timestamp columns compare against"""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def next_timestamp(previous: datetime) -> datetime:
    """Current time, nudged past ``previous`` so update stamps strictly advance"""
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def first_day_of_month(day: date) -> date:
    return day.replace(day=1)


def to_calendar_date(value: Union[date, datetime, str]) -> date:
    """
    Truncate a date-like value to its calendar date.

    Datetimes are moved to UTC first (naive ones are taken to already be UTC),
    then the time of day is dropped.
    """
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError(f"Cannot convert {type(value).__name__} to a calendar date")


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    # str() first so floats like 100.1 do not drag binary noise into the decimal
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_float(value: Union[Decimal, float, int, str]) -> float:
    return float(to_money(value))


def parse_time_of_day(text: str) -> int:
    """Minutes after midnight for a zero-padded 24-hour "HH:MM" string"""
    if not isinstance(text, str) or len(text) != 5 or text[2] != ":":
        raise ValueError(f"Time must be formatted as HH:MM, got {text!r}")
    hours, minutes = text[:2], text[3:]
    if not (hours.isdigit() and minutes.isdigit()):
        raise ValueError(f"Time must be formatted as HH:MM, got {text!r}")
    hours, minutes = int(hours), int(minutes)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {text!r}")
    return hours * 60 + minutes


def format_time_of_day(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
