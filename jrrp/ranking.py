"""
Aggregation and ranking over the luck ledger.

Averages, day leaderboards (global or guild scoped) and per-user history
series. Empty results are successful and empty; only a missing average is
an error, because a mean over nothing has no value to show.
"""

from __future__ import annotations

from typing import Callable, Collection, Dict, Iterable, List, Optional, Sequence, Tuple

from .database import JrrpDatabase
from .errors import NotFoundError, ValidationError
from .models import Leaderboard, LuckRecord, RankedEntry, RankLookup
from .utils import normalize_day, normalize_month, split_uid

Series = List[Tuple[str, int]]
NameFallback = Callable[[str], Optional[str]]


def in_scope(uid: str, members: Optional[Collection[str]] = None, platform: Optional[str] = None) -> bool:
    """
    Check a "platform:id" uid against the leaderboard scope.

    `members` holds bare ids (the part after the colon); None means global.
    """
    uid_platform, user_id = split_uid(uid)
    if platform is not None and uid_platform != platform:
        return False
    if members is not None and user_id not in members:
        return False
    return True


def rank_entries(
    day: str,
    entries: Iterable[RankedEntry],
    *,
    reverse: bool = False,
    max_count: Optional[int] = None,
    uid: Optional[str] = None,
) -> Leaderboard:
    """
    Sort, truncate and locate `uid` in already-scoped entries.

    Highest value first unless `reverse`. Ties keep their input order.
    `max_count` of None or 0 means no limit.
    """
    if max_count is not None and max_count < 0:
        raise ValidationError(
            f"Maximum count must not be negative, got {max_count}.",
            details={"max_count": max_count},
        )

    # sorted() stays stable with reverse=True
    ranked = sorted(entries, key=lambda entry: entry.value, reverse=not reverse)
    top = ranked[:max_count] if max_count else list(ranked)

    if uid is None:
        lookup = RankLookup.no_record()
    else:
        position = next((i for i, entry in enumerate(top, 1) if entry.uid == uid), None)
        if position is not None:
            lookup = RankLookup.found(position)
        elif any(entry.uid == uid for entry in ranked):
            lookup = RankLookup.not_in_top()
        else:
            lookup = RankLookup.no_record()

    return Leaderboard(day=day, entries=top, total=len(ranked), rank=lookup, reverse=reverse)


def to_series(records: Iterable[LuckRecord]) -> Series:
    return sorted(((record.day, record.value) for record in records), key=lambda point: point[0])


def compare_histories(
    own: Sequence[Tuple[str, int]], other: Sequence[Tuple[str, int]]
) -> List[Tuple[str, Optional[int], Optional[int]]]:
    """Line up two series on the union of their days."""
    own_map = dict(own)
    other_map = dict(other)
    days = sorted(set(own_map) | set(other_map))
    return [(day, own_map.get(day), other_map.get(day)) for day in days]


class LuckStats:
    """Read-side views over the ledger."""

    def __init__(self, db: JrrpDatabase):
        self.db = db

    async def average(self, uid: str) -> float:
        value = await self.db.average(uid)
        if value is None:
            raise NotFoundError(f"No luck history for {uid}.", details={"uid": uid})
        return value

    async def leaderboard(
        self,
        day: str,
        *,
        members: Optional[Collection[str]] = None,
        platform: Optional[str] = None,
        reverse: bool = False,
        max_count: Optional[int] = None,
        uid: Optional[str] = None,
        fallback_name: Optional[NameFallback] = None,
    ) -> Leaderboard:
        day = normalize_day(day)
        records = [
            record for record in await self.db.get_records_for_day(day)
            if in_scope(record.uid, members, platform)
        ]
        names = await self.db.get_names(record.uid for record in records)

        entries = [
            RankedEntry(uid=record.uid, name=self._resolve_name(record.uid, names, fallback_name), value=record.value)
            for record in records
        ]
        return rank_entries(day, entries, reverse=reverse, max_count=max_count, uid=uid)

    @staticmethod
    def _resolve_name(uid: str, names: Dict[str, str], fallback_name: Optional[NameFallback]) -> str:
        name = names.get(uid)
        if name:
            return name
        if fallback_name is not None:
            name = fallback_name(uid)
            if name:
                return name
        return uid

    async def history(self, uid: str) -> Series:
        return to_series(await self.db.get_user_records(uid))

    async def history_range(self, uid: str, year_month: str) -> Series:
        return to_series(await self.db.get_user_records(uid, month=normalize_month(year_month)))
