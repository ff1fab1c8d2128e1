"""
Shared pytest fixtures.

Each test gets its own SQLite file under tmp_path. Coroutines are driven
with asyncio.run so no async test plugin is needed.
"""
import asyncio

import pytest

from jrrp.database import JrrpDatabase
from jrrp.ledger import LuckLedger
from jrrp.models import LuckRecord
from jrrp.ranking import LuckStats


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def db(tmp_path):
    database = JrrpDatabase(tmp_path / "jrrp.db")
    run(database.initialize())
    return database


@pytest.fixture()
def ledger(db):
    return LuckLedger(db, salt="test-salt")


@pytest.fixture()
def stats(db):
    return LuckStats(db)


@pytest.fixture()
def seed(db):
    """Insert (uid, day, value) tuples in order."""
    def _seed(*rows):
        for uid, day, value in rows:
            run(db.create_record(LuckRecord(uid=uid, day=day, value=value)))
    return _seed
