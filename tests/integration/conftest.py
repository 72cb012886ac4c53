"""Fixtures for API integration tests."""

from __future__ import annotations

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from timekeeping.api.app import create_app
from timekeeping.api.dependencies import get_app_settings, get_db_session, get_scan_cooldown
from timekeeping.models import Employee

EMPLOYEE_ID = "EMP-001"


@pytest.fixture
async def seeded(session_factory):
    """Commit an active team leader so API sessions can see it."""
    async with session_factory() as session:
        session.add(
            Employee(
                employee_id=EMPLOYEE_ID,
                first_name="Maria",
                last_name="Santos",
                birthday=date(1990, 3, 12),
                position="Team Leader",
                branch="Cabanatuan",
                is_active=True,
            )
        )
        await session.commit()
    return EMPLOYEE_ID


@pytest.fixture
async def client(session_factory, settings, cooldown):
    """HTTP client bound to an app using the test database."""
    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_scan_cooldown] = lambda: cooldown

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
