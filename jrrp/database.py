"""
Database layer for Jrrp
Luck records and display names, stored with aiosqlite
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import aiosqlite

from .config import DAY_FORMAT, LEGACY_TABLE, LUCK_MAX, LUCK_MIN
from .errors import ConflictError, UpstreamError
from .models import LuckRecord
from .utils import normalize_month, resolve_timezone

log = logging.getLogger("red.FARA.Jrrp.database")

# SQLite caps the number of bound parameters per statement
_IN_CHUNK = 500


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _timestamp() -> int:
    """Get current Unix timestamp."""
    return int(datetime.now(timezone.utc).timestamp())


class JrrpDatabase:
    """SQLite store for luck records and display names."""

    def __init__(self, db_path):
        self.db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self):
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            raise UpstreamError(f"Database error: {e}", details={"db": str(self.db_path)}) from e

    async def initialize(self):
        """Create database tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._connect() as db:
            await db.execute(f"""
                CREATE TABLE IF NOT EXISTS luck_records (
                    uid TEXT NOT NULL,
                    day TEXT NOT NULL,
                    value INTEGER NOT NULL CHECK (value BETWEEN {LUCK_MIN} AND {LUCK_MAX}),
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (uid, day)
                )
            """)
            await db.execute("CREATE INDEX IF NOT EXISTS idx_luck_day ON luck_records(day)")

            await db.execute("""
                CREATE TABLE IF NOT EXISTS display_names (
                    uid TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            await db.commit()

        log.info(f"Jrrp database initialized at {self.db_path}")

    # ==================== LUCK RECORDS ====================

    async def get_record(self, uid: str, day: str) -> Optional[LuckRecord]:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT uid, day, value FROM luck_records WHERE uid = ? AND day = ?",
                (uid, day),
            )
            row = await cursor.fetchone()
        return LuckRecord.from_row(row) if row else None

    async def create_record(self, record: LuckRecord):
        """
        Insert a record only if (uid, day) is free.

        Raises ConflictError when another writer got there first.
        """
        async with self._connect() as db:
            try:
                await db.execute(
                    "INSERT INTO luck_records (uid, day, value, created_at) VALUES (?, ?, ?, ?)",
                    (record.uid, record.day, record.value, _now_iso()),
                )
                await db.commit()
            except aiosqlite.IntegrityError:
                raise ConflictError(record.uid, record.day) from None

    async def upsert_records(self, records: Iterable[LuckRecord]) -> int:
        """
        Insert or overwrite records. Returns the number written.

        An existing row keeps its rowid and created_at, so leaderboard ties
        stay in first-roll order.
        """
        rows = [(r.uid, r.day, r.value, _now_iso()) for r in records]
        if not rows:
            return 0
        async with self._connect() as db:
            await db.executemany(
                """
                INSERT INTO luck_records (uid, day, value, created_at) VALUES (?, ?, ?, ?)
                ON CONFLICT(uid, day) DO UPDATE SET value = excluded.value
                """,
                rows,
            )
            await db.commit()
        return len(rows)

    async def get_records_for_day(self, day: str) -> List[LuckRecord]:
        """All records of one day, in insertion order."""
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT uid, day, value FROM luck_records WHERE day = ? ORDER BY rowid",
                (day,),
            )
            rows = await cursor.fetchall()
        return [LuckRecord.from_row(row) for row in rows]

    async def get_user_records(self, uid: str, month: Optional[str] = None) -> List[LuckRecord]:
        """A user's records sorted by day, optionally limited to one YYYY-MM month."""
        query = "SELECT uid, day, value FROM luck_records WHERE uid = ?"
        params: tuple = (uid,)
        if month is not None:
            query += " AND day LIKE ?"
            params = (uid, f"{normalize_month(month)}-%")
        query += " ORDER BY day ASC"

        async with self._connect() as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
        return [LuckRecord.from_row(row) for row in rows]

    async def average(self, uid: str) -> Optional[float]:
        """Mean luck value of a user, None when there are no records."""
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT AVG(value) AS avg_value, COUNT(*) AS n FROM luck_records WHERE uid = ?",
                (uid,),
            )
            row = await cursor.fetchone()
        if not row or not row["n"]:
            return None
        return float(row["avg_value"])

    async def count_records(self, uid: Optional[str] = None) -> int:
        async with self._connect() as db:
            if uid is None:
                cursor = await db.execute("SELECT COUNT(*) FROM luck_records")
            else:
                cursor = await db.execute("SELECT COUNT(*) FROM luck_records WHERE uid = ?", (uid,))
            row = await cursor.fetchone()
        return int(row[0])

    # ==================== DISPLAY NAMES ====================

    async def get_name(self, uid: str) -> Optional[str]:
        async with self._connect() as db:
            cursor = await db.execute("SELECT name FROM display_names WHERE uid = ?", (uid,))
            row = await cursor.fetchone()
        return row["name"] if row else None

    async def get_names(self, uids: Iterable[str]) -> Dict[str, str]:
        """Look up many display names at once; missing uids are left out."""
        uids = list(dict.fromkeys(uids))
        names: Dict[str, str] = {}
        if not uids:
            return names
        async with self._connect() as db:
            for start in range(0, len(uids), _IN_CHUNK):
                chunk = uids[start:start + _IN_CHUNK]
                placeholders = ",".join("?" for _ in chunk)
                cursor = await db.execute(
                    f"SELECT uid, name FROM display_names WHERE uid IN ({placeholders})",
                    chunk,
                )
                for row in await cursor.fetchall():
                    names[row["uid"]] = row["name"]
        return names

    async def set_name(self, uid: str, name: str):
        async with self._connect() as db:
            await db.execute(
                "INSERT OR REPLACE INTO display_names (uid, name, updated_at) VALUES (?, ?, ?)",
                (uid, name, _now_iso()),
            )
            await db.commit()

    async def update_name(self, uid: str, name: str) -> bool:
        """Overwrite an existing display name. Unknown uids are left out."""
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE display_names SET name = ?, updated_at = ? WHERE uid = ?",
                (name, _now_iso(), uid),
            )
            await db.commit()
        return cursor.rowcount > 0

    # ==================== MIGRATIONS ====================

    async def migrate_legacy(self, tz_name: str = "UTC") -> int:
        """
        Import rows from the old luck_records_v1 layout.

        That table stored the day as epoch milliseconds. Days are converted
        in `tz_name`, existing rows win, and the legacy table is renamed so
        the import runs only once. Returns the number of imported rows.
        """
        tz = resolve_timezone(tz_name)

        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
                (LEGACY_TABLE,),
            )
            if not await cursor.fetchone():
                return 0

            log.info(f"Migrating {LEGACY_TABLE} to luck_records...")
            cursor = await db.execute(f"SELECT uid, day, rp FROM {LEGACY_TABLE} ORDER BY id")
            legacy_rows = await cursor.fetchall()

            imported = 0
            skipped = 0
            for row in legacy_rows:
                value = row["rp"]
                if value is None or not LUCK_MIN <= int(value) <= LUCK_MAX:
                    skipped += 1
                    continue
                day = datetime.fromtimestamp(int(row["day"]) / 1000, tz).strftime(DAY_FORMAT)
                cursor = await db.execute(
                    "INSERT OR IGNORE INTO luck_records (uid, day, value, created_at) VALUES (?, ?, ?, ?)",
                    (row["uid"], day, int(value), _now_iso()),
                )
                imported += cursor.rowcount

            await db.execute(f"ALTER TABLE {LEGACY_TABLE} RENAME TO {LEGACY_TABLE}_migrated_{_timestamp()}")
            await db.commit()

        if skipped:
            log.warning(f"Skipped {skipped} legacy rows with out-of-range values")
        log.info(f"Migrated {imported} legacy luck records")
        return imported
