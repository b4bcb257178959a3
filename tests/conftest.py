"""
Shared pytest fixtures: a throwaway SQLite database per test, session
factories, seeded clinic/doctor/shift rows and an HTTP client for the app.
"""

import os
from typing import AsyncGenerator

# must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest_clinic_queue.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.db import Base, get_db
from app.main import app
from app.models import Clinic, Doctor, ShiftTime
from app.models.doctor import GenderEnum
from app.models.shift_time import ShiftStatus

SHIFT_DATE = "2024-06-01"
SHIFT_RANGE = "9.00am - 10.00am"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """File-backed SQLite so separate sessions really are separate connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'clinic_queue.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine) -> async_sessionmaker:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ============================================================================
# SEED DATA
# ============================================================================
# Seed rows are created in their own session and returned detached, so a
# rollback inside the session under test never expires them.


async def _persist(session_factory, *objs):
    async with session_factory() as session:
        session.add_all(objs)
        await session.commit()
    return objs


def make_doctor(clinic_id: str, name: str = "Dr. Perera") -> Doctor:
    return Doctor(
        clinic_id=clinic_id,
        name=name,
        gender=GenderEnum.Female,
        phone_number="0771234567",
        city="Colombo",
        specialization="General",
        shift_time_ids=[],
    )


@pytest_asyncio.fixture
async def clinic(session_factory) -> Clinic:
    (c,) = await _persist(session_factory, Clinic(name="Central Clinic", city="Colombo"))
    return c


@pytest_asyncio.fixture
async def other_clinic(session_factory) -> Clinic:
    (c,) = await _persist(session_factory, Clinic(name="Harbour Clinic", city="Galle"))
    return c


@pytest_asyncio.fixture
async def doctor(session_factory, clinic) -> Doctor:
    (d,) = await _persist(session_factory, make_doctor(clinic.id))
    return d


@pytest_asyncio.fixture
async def other_doctor(session_factory, other_clinic) -> Doctor:
    (d,) = await _persist(session_factory, make_doctor(other_clinic.id, name="Dr. Silva"))
    return d


@pytest_asyncio.fixture
async def make_shift(session_factory):
    async def _make(doctor: Doctor, **overrides) -> ShiftTime:
        fields = {
            "date": SHIFT_DATE,
            "time_range": SHIFT_RANGE,
            "shift_name": "Shift 1",
            "status": ShiftStatus.Available,
            "is_active": True,
        }
        fields.update(overrides)
        (s,) = await _persist(
            session_factory,
            ShiftTime(clinic_id=doctor.clinic_id, doctor_id=doctor.id, **fields),
        )
        return s

    return _make


@pytest_asyncio.fixture
async def shift(make_shift, doctor) -> ShiftTime:
    return await make_shift(doctor)


@pytest.fixture
def patient() -> dict:
    return {
        "patient_name": "Nimal Fernando",
        "patient_gender": "Male",
        "patient_age": 42,
        "patient_contact": "0719876543",
    }


# ============================================================================
# HTTP CLIENT
# ============================================================================


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
