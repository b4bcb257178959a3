"""
Tests for the per (doctor, shift, date) queue counter.
"""

import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import OperationalError

from app.core.db import transaction
from app.core.errors import ConflictError
from app.models import QueueCounter
from app.services import queue_counter
from app.services.queue_counter import get_counter_value, reserve_next

SHIFT_DATE = "2024-06-01"


async def _reserve(session_factory, doctor_id, shift_id, date=SHIFT_DATE):
    async with session_factory() as session:
        async with transaction(session):
            return await reserve_next(session, doctor_id, shift_id, date)


class TestReserveNext:
    async def test_sequential_numbers_start_at_one(self, session_factory, doctor, shift):
        numbers = [await _reserve(session_factory, doctor.id, shift.id) for _ in range(5)]
        assert numbers == [1, 2, 3, 4, 5]

    async def test_keys_are_independent(self, session_factory, doctor, make_shift):
        morning = await make_shift(doctor)
        evening = await make_shift(doctor, time_range="4.00pm - 6.00pm")

        assert await _reserve(session_factory, doctor.id, morning.id) == 1
        assert await _reserve(session_factory, doctor.id, morning.id) == 2
        assert await _reserve(session_factory, doctor.id, evening.id) == 1
        assert await _reserve(session_factory, doctor.id, morning.id, "2024-06-02") == 1

    async def test_only_one_row_per_key(self, session_factory, db_session, doctor, shift):
        for _ in range(3):
            await _reserve(session_factory, doctor.id, shift.id)
        count = (await db_session.execute(select(func.count()).select_from(QueueCounter))).scalar_one()
        assert count == 1

    async def test_concurrent_reservations_are_distinct(self, session_factory, doctor, shift):
        results = await asyncio.gather(
            *(_reserve(session_factory, doctor.id, shift.id) for _ in range(10))
        )
        assert sorted(results) == list(range(1, 11))

    async def test_rollback_discards_increment(self, session_factory, db_session, doctor, shift):
        await _reserve(session_factory, doctor.id, shift.id)

        async with session_factory() as session:
            await reserve_next(session, doctor.id, shift.id, SHIFT_DATE)
            await session.rollback()

        assert await get_counter_value(db_session, doctor.id, shift.id, SHIFT_DATE) == 1


class TestCounterValue:
    async def test_missing_counter_reads_zero(self, db_session, doctor, shift):
        assert await get_counter_value(db_session, doctor.id, shift.id, SHIFT_DATE) == 0

    async def test_reads_current_value(self, session_factory, db_session, doctor, shift):
        await _reserve(session_factory, doctor.id, shift.id)
        await _reserve(session_factory, doctor.id, shift.id)
        assert await get_counter_value(db_session, doctor.id, shift.id, SHIFT_DATE) == 2


class _LockedSession:
    """Session stand-in whose statements fail the way a locked database reports it."""

    def __init__(self, dialect_name, orig):
        self._bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect_name))
        self._orig = orig

    def get_bind(self):
        return self._bind

    async def execute(self, stmt):
        raise OperationalError("INSERT INTO queue_counters", {}, self._orig)


class TestFirstReservation:
    async def test_concurrent_first_reservations_share_one_row(self, session_factory, db_session, doctor, make_shift):
        morning = await make_shift(doctor)
        evening = await make_shift(doctor, time_range="4.00pm - 6.00pm")

        results = await asyncio.gather(
            *(_reserve(session_factory, doctor.id, s.id) for s in [morning, evening] * 4)
        )

        assert sorted(results) == [1, 1, 2, 2, 3, 3, 4, 4]
        count = (await db_session.execute(select(func.count()).select_from(QueueCounter))).scalar_one()
        assert count == 2

    @pytest.mark.parametrize("dialect_name, clause", [
        ("mysql", "ON DUPLICATE KEY UPDATE"),
        ("sqlite", "ON CONFLICT"),
        ("postgresql", "ON CONFLICT"),
    ])
    def test_upsert_statement_per_dialect(self, dialect_name, clause):
        dialects = {"mysql": mysql, "sqlite": sqlite, "postgresql": postgresql}
        stmt = queue_counter._upsert_increment(dialect_name, "doc", "shift", "2024-06-01")
        sql = str(stmt.compile(dialect=dialects[dialect_name].dialect()))
        assert clause in sql
        assert "current_queue + " in sql

    def test_unsupported_dialect(self):
        with pytest.raises(NotImplementedError):
            queue_counter._upsert_increment("oracle", "doc", "shift", "2024-06-01")

    @pytest.mark.parametrize("dialect_name, orig", [
        ("mysql", Exception(1213, "Deadlock found when trying to get lock; try restarting transaction")),
        ("mysql", Exception(1205, "Lock wait timeout exceeded; try restarting transaction")),
        ("sqlite", Exception("database is locked")),
    ])
    async def test_lock_conflict_is_typed(self, dialect_name, orig):
        with pytest.raises(ConflictError) as exc:
            await reserve_next(_LockedSession(dialect_name, orig), "doc", "shift", "2024-06-01")
        assert exc.value.context["shift_time_id"] == "shift"

    async def test_other_operational_errors_propagate(self):
        orig = Exception(2013, "Lost connection to MySQL server during query")
        with pytest.raises(OperationalError):
            await reserve_next(_LockedSession("mysql", orig), "doc", "shift", "2024-06-01")
