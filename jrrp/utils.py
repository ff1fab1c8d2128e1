"""
Utility functions for Jrrp
Day/month normalisation, user id helpers and "today" in a timezone
"""

from datetime import date, datetime
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DAY_FORMAT, MONTH_FORMAT, UID_SEPARATOR
from .errors import InvalidDayError, ValidationError


def normalize_day(value: Union[str, date]) -> str:
    """
    Return `value` as a YYYY-MM-DD string.

    Strings must already be in that exact form (zero padded); anything
    else raises InvalidDayError.
    """
    if isinstance(value, datetime):
        return value.date().strftime(DAY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DAY_FORMAT)
    if not isinstance(value, str):
        raise InvalidDayError(value)
    try:
        parsed = datetime.strptime(value, DAY_FORMAT)
    except ValueError:
        raise InvalidDayError(value) from None
    if parsed.strftime(DAY_FORMAT) != value:
        raise InvalidDayError(value)
    return value


def normalize_month(value: str) -> str:
    """Validate a YYYY-MM string."""
    if not isinstance(value, str):
        raise InvalidDayError(value, expected="YYYY-MM")
    try:
        parsed = datetime.strptime(value, MONTH_FORMAT)
    except ValueError:
        raise InvalidDayError(value, expected="YYYY-MM") from None
    if parsed.strftime(MONTH_FORMAT) != value:
        raise InvalidDayError(value, expected="YYYY-MM")
    return value


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(
            f"Unknown timezone {name!r}.", details={"timezone": name}
        ) from None


def today_string(tz_name: str = "UTC", now: Optional[datetime] = None) -> str:
    """Today's day string in the given timezone."""
    tz = resolve_timezone(tz_name)
    current = now.astimezone(tz) if now else datetime.now(tz)
    return current.strftime(DAY_FORMAT)


def this_month(tz_name: str = "UTC") -> str:
    return today_string(tz_name)[:7]


def make_uid(platform: str, user_id) -> str:
    return f"{platform}{UID_SEPARATOR}{user_id}"


def split_uid(uid: str) -> Tuple[str, str]:
    """
    Split "platform:id" into its parts.

    Identifiers without a separator have an empty platform.
    """
    platform, sep, user_id = uid.partition(UID_SEPARATOR)
    if not sep:
        return "", uid
    return platform, user_id
