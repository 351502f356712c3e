import os
import tempfile
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional

# Must be set before the application modules read their settings
_TEST_DIR = Path(tempfile.mkdtemp(prefix="carbon-tests-"))
API_DB_PATH = _TEST_DIR / "api.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{API_DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["EMISSION_THRESHOLD"] = "1000"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from app.core.security import Principal, hash_password
from app.models import *  # noqa: F401,F403 - register tables
from app.models.credit import CarbonCredit, CreditReadingLink
from app.models.reading import EmissionReading
from app.models.sensor import Sensor, SensorStatus
from app.models.user import User, UserRole
from app.handlers.carbon import compute_credit

THRESHOLD = 1000.0


@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db_session:
        yield db_session


async def create_user(
    session: AsyncSession,
    email: str = "operator@example.com",
    role: UserRole = UserRole.OPERATOR
) -> User:
    user = User(name=email.split("@")[0], email=email, role=role, password_hash=hash_password("secret"))
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_sensor(
    session: AsyncSession,
    user: User,
    sensor_id: str = "SENSOR_001",
    status: SensorStatus = SensorStatus.ACTIVE,
    location: str = "Main Chimney"
) -> Sensor:
    sensor = Sensor(sensor_id=sensor_id, sensor_type="CO2", location=location, status=status, user_id=user.id)
    session.add(sensor)
    await session.commit()
    return sensor


async def create_linked_credit(
    session: AsyncSession,
    sensor: Sensor,
    emission_id: str,
    co2_value: float,
    calculated_date: date,
    timestamp: Optional[datetime] = None
) -> CarbonCredit:
    """Insert a reading with a credit computed for it, bypassing ingestion."""
    reading = EmissionReading(
        emission_id=emission_id,
        sensor_id=sensor.sensor_id,
        timestamp=timestamp or datetime.combine(calculated_date, time.min, tzinfo=timezone.utc),
        co2_value=co2_value,
    )
    computation = compute_credit(co2_value, THRESHOLD)
    credit = CarbonCredit(
        credit_id=f"CC_{emission_id}",
        calculated_date=calculated_date,
        emission_value=co2_value,
        allowed_limit=THRESHOLD,
        credit_amount=computation.credit_amount,
        status=computation.status,
    )
    session.add(reading)
    session.add(credit)
    await session.flush()
    session.add(CreditReadingLink(map_id=f"MAP_CC_{emission_id}", credit_id=credit.credit_id, emission_id=emission_id))
    await session.commit()
    return credit


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role.value)


@pytest_asyncio.fixture
async def operator(session) -> User:
    return await create_user(session)


@pytest_asyncio.fixture
async def sensor(session, operator) -> Sensor:
    return await create_sensor(session, operator)


@pytest.fixture
def principal(operator) -> Principal:
    return principal_for(operator)


@pytest.fixture
def api_client() -> Iterator[TestClient]:
    from main import create_app

    app = create_app()
    with TestClient(app) as client:
        yield client

    if API_DB_PATH.exists():
        API_DB_PATH.unlink()
