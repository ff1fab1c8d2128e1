"""
Data models for Jrrp
Type-safe dataclasses for luck records, scheduled events and leaderboards
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .config import DAY_FORMAT, LUCK_MAX, LUCK_MIN
from .errors import ValidationError
from .utils import normalize_day


def _check_luck_value(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"Luck value must be an integer, got {value!r}.",
            details={"value": repr(value)},
        )
    if not LUCK_MIN <= value <= LUCK_MAX:
        raise ValidationError(
            f"Luck value must be between {LUCK_MIN} and {LUCK_MAX}, got {value}.",
            details={"value": value},
        )
    return value


# Allowed range of each calendar field of a ScheduledEvent
_EVENT_BOUNDS = {"year": (1, 9999), "month": (1, 12), "day": (1, 31)}


@dataclass(frozen=True)
class LuckRecord:
    """One luck value for one user on one day."""
    uid: str
    day: str
    value: int

    @classmethod
    def from_row(cls, row) -> "LuckRecord":
        return cls(uid=row["uid"], day=row["day"], value=int(row["value"]))


@dataclass(frozen=True)
class ScheduledEvent:
    """
    Forces `value` on every day matching the calendar fields.

    A field left as None matches any year / month / day of month.
    """
    value: int
    reason: str
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None

    def __post_init__(self):
        _check_luck_value(self.value)
        if not isinstance(self.reason, str) or not self.reason.strip():
            raise ValidationError("Event reason must be a non-empty string.", details={"reason": repr(self.reason)})
        for name, (low, high) in _EVENT_BOUNDS.items():
            raw = getattr(self, name)
            if raw is None:
                continue
            if isinstance(raw, bool) or not isinstance(raw, int) or not low <= raw <= high:
                raise ValidationError(
                    f"Event {name} must be an integer between {low} and {high}, got {raw!r}.",
                    details={"field": name, "value": repr(raw)},
                )

    def matches(self, day: str) -> bool:
        parsed = datetime.strptime(normalize_day(day), DAY_FORMAT)
        if self.year is not None and parsed.year != self.year:
            return False
        if self.month is not None and parsed.month != self.month:
            return False
        if self.day is not None and parsed.day != self.day:
            return False
        return True

    def describe(self) -> str:
        year = f"{self.year:04d}" if self.year is not None else "*"
        month = f"{self.month:02d}" if self.month is not None else "*"
        day = f"{self.day:02d}" if self.day is not None else "*"
        return f"{year}-{month}-{day} → {self.value} ({self.reason})"

    def to_json(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "reason": self.reason,
            "year": self.year,
            "month": self.month,
            "day": self.day,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ScheduledEvent":
        """Build an event from stored config, validating every field."""
        if not isinstance(data, dict):
            raise ValidationError(f"Event definition must be a mapping, got {data!r}.")

        reason = data.get("reason")
        if isinstance(reason, str):
            reason = reason.strip()
        return cls(
            value=data.get("value"),
            reason=reason,
            **{name: data.get(name) for name in _EVENT_BOUNDS},
        )

    @classmethod
    def from_pattern(cls, pattern: str, value: int, reason: str) -> "ScheduledEvent":
        """
        Build an event from a "YYYY-MM-DD" pattern where any part may be "*".

        "*-01-01" is every New Year's Day, "2024-01-*" all of January 2024.
        """
        parts = pattern.strip().split("-")
        if len(parts) != 3:
            raise ValidationError(
                f"Event pattern {pattern!r} must look like YYYY-MM-DD, with * for any part.",
                details={"pattern": pattern},
            )
        data: Dict[str, Any] = {"value": value, "reason": reason}
        for name, part in zip(("year", "month", "day"), parts):
            if part == "*":
                data[name] = None
            elif part.isdigit():
                data[name] = int(part)
            else:
                raise ValidationError(
                    f"Event pattern {pattern!r} has an invalid {name} {part!r}.",
                    details={"pattern": pattern, "field": name},
                )
        return cls.from_json(data)


def load_events(raw_events: Iterable[Dict[str, Any]]) -> List[ScheduledEvent]:
    """Parse configured events, keeping their declared order."""
    return [ScheduledEvent.from_json(data) for data in raw_events]


def find_event(events: Iterable[ScheduledEvent], day: str) -> Optional[ScheduledEvent]:
    """First event in declared order that matches `day`."""
    for event in events:
        if event.matches(day):
            return event
    return None


@dataclass(frozen=True)
class LuckResult:
    """Outcome of asking the ledger for today's value."""
    value: int
    created: bool
    event_reason: Optional[str] = None

    @property
    def from_event(self) -> bool:
        return self.event_reason is not None


@dataclass(frozen=True)
class RankedEntry:
    uid: str
    name: str
    value: int


class RankStatus(Enum):
    FOUND = "found"
    NOT_IN_TOP = "not_in_top"
    NO_RECORD = "no_record"


@dataclass(frozen=True)
class RankLookup:
    """Where the requesting user ended up on a leaderboard."""
    status: RankStatus
    rank: Optional[int] = None

    @classmethod
    def found(cls, rank: int) -> "RankLookup":
        return cls(RankStatus.FOUND, rank)

    @classmethod
    def not_in_top(cls) -> "RankLookup":
        return cls(RankStatus.NOT_IN_TOP)

    @classmethod
    def no_record(cls) -> "RankLookup":
        return cls(RankStatus.NO_RECORD)


@dataclass
class Leaderboard:
    """A ranked, scope-filtered, truncated view of one day."""
    day: str
    entries: List[RankedEntry] = field(default_factory=list)
    total: int = 0
    rank: RankLookup = field(default_factory=RankLookup.no_record)
    reverse: bool = False

    @property
    def is_empty(self) -> bool:
        return self.total == 0
