"""Pytest fixtures for timekeeping tests."""

from __future__ import annotations

from datetime import date
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from timekeeping.config import Settings
from timekeeping.models import Base, Employee
from timekeeping.services import ScanCooldown

# One shared in-memory SQLite connection per test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    """Settings pinned to Manila time and the default windows."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        engine_version="test",
        civil_timezone="Asia/Manila",
        scan_cooldown_seconds=60,
        duplicate_window_seconds=300,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
    )


@pytest.fixture
def cooldown(settings) -> ScanCooldown:
    return ScanCooldown(settings.scan_cooldown_seconds)


@pytest.fixture
async def employee(session) -> Employee:
    """An active team leader at the Cabanatuan branch, born in March."""
    emp = Employee(
        employee_id="EMP-001",
        first_name="Maria",
        middle_name="Reyes",
        last_name="Santos",
        birthday=date(1990, 3, 12),
        hired_date=date(2020, 6, 1),
        position="Team Leader",
        branch="Cabanatuan",
        is_active=True,
    )
    session.add(emp)
    await session.flush()
    return emp


@pytest.fixture
async def inactive_employee(session) -> Employee:
    emp = Employee(
        employee_id="EMP-900",
        first_name="Jose",
        last_name="Cruz",
        birthday=date(1985, 7, 1),
        position="Regular Staff",
        branch="Solano",
        is_active=False,
    )
    session.add(emp)
    await session.flush()
    return emp
