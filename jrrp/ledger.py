"""
Luck ledger
Hands out one luck value per user per day and applies scheduled events
"""

import logging
import random
from typing import Iterable, List, Optional

from .config import LUCK_MAX, LUCK_MIN
from .database import JrrpDatabase
from .errors import ConflictError, ValidationError
from .models import LuckRecord, LuckResult, ScheduledEvent, find_event
from .utils import normalize_day

log = logging.getLogger("red.FARA.Jrrp.ledger")


class LuckLedger:
    """
    Today's luck for each user.

    Organic values are derived from (salt, uid, day), so every request for
    the same user and day computes the same number. The primary key of the
    store still decides which write wins.
    """

    def __init__(self, db: JrrpDatabase, events: Iterable[ScheduledEvent] = (), salt: str = ""):
        self.db = db
        self.events: List[ScheduledEvent] = list(events)
        self.salt = salt

    def set_events(self, events: Iterable[ScheduledEvent]):
        self.events = list(events)

    def match_event(self, day: str) -> Optional[ScheduledEvent]:
        return find_event(self.events, day)

    def roll(self, uid: str, day: str) -> int:
        """Uniform value in [LUCK_MIN, LUCK_MAX] for this user and day."""
        rng = random.Random(f"{self.salt}:{uid}:{day}")
        return rng.randint(LUCK_MIN, LUCK_MAX)

    async def get_or_assign_today(self, uid: str, today: str) -> LuckResult:
        if not uid:
            raise ValidationError("User id must not be empty.")
        today = normalize_day(today)

        event = self.match_event(today)
        if event is not None:
            return await self._apply_event(uid, today, event)

        existing = await self.db.get_record(uid, today)
        if existing is not None:
            return LuckResult(value=existing.value, created=False)

        record = LuckRecord(uid=uid, day=today, value=self.roll(uid, today))
        try:
            await self.db.create_record(record)
        except ConflictError:
            # Lost the race: whoever won already stored today's value
            winner = await self.db.get_record(uid, today)
            if winner is None:
                raise
            log.debug(f"Concurrent roll for {uid} on {today}, using stored value")
            return LuckResult(value=winner.value, created=False)

        log.debug(f"Rolled {record.value} for {uid} on {today}")
        return LuckResult(value=record.value, created=True)

    async def _apply_event(self, uid: str, day: str, event: ScheduledEvent) -> LuckResult:
        previous = await self.db.get_record(uid, day)
        await self.db.upsert_records([LuckRecord(uid=uid, day=day, value=event.value)])
        if previous is None or previous.value != event.value:
            log.info(f"Event '{event.reason}' forced {event.value} for {uid} on {day}")
        return LuckResult(value=event.value, created=previous is None, event_reason=event.reason)
