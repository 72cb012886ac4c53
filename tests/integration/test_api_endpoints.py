"""API endpoint integration tests."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
import pytz
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from timekeeping.api.app import create_app
from timekeeping.api.dependencies import get_app_settings, get_db_session
from timekeeping.calculators.clock import civil_date
from timekeeping.calculators.types import PunchType
from timekeeping.models import AttendanceLog

MANILA = pytz.timezone("Asia/Manila")

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "missing_tables": []}

    async def test_readiness_reports_missing_tables(self, settings):
        """A database without the schema is reachable but not ready."""
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        app = create_app()

        async def empty_db_session():
            async with factory() as session:
                yield session

        app.dependency_overrides[get_db_session] = empty_db_session
        app.dependency_overrides[get_app_settings] = lambda: settings
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/ready")
        finally:
            await engine.dispose()

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert "employee" in data["missing_tables"]
        assert "attendance_log" in data["missing_tables"]

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestScans:
    """Test POST /api/v1/scans."""

    async def test_scan_recorded(self, client: AsyncClient, seeded):
        """First scan of the day lands in AM_IN or, after the break, PM_IN."""
        response = await client.post("/api/v1/scans", json={"employee_id": f"  {seeded} "})
        assert response.status_code == 201

        data = response.json()
        assert data["employee_id"] == seeded
        assert data["punch_type"] in (PunchType.AM_IN.value, PunchType.PM_IN.value)
        assert data["work_date"] == civil_date(datetime.now(pytz.utc)).isoformat()
        assert data["display_time"].endswith(("AM", "PM"))

    async def test_rescan_hits_cooldown(self, client: AsyncClient, seeded):
        await client.post("/api/v1/scans", json={"employee_id": seeded})
        response = await client.post("/api/v1/scans", json={"employee_id": seeded})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_SCAN"
        assert 0 < int(response.headers["Retry-After"]) <= 60

    async def test_unknown_employee(self, client: AsyncClient, seeded):
        response = await client.post("/api/v1/scans", json={"employee_id": "NOPE"})
        assert response.status_code == 404
        assert response.json()["code"] == "EMPLOYEE_NOT_FOUND"

    async def test_blank_employee_id(self, client: AsyncClient):
        response = await client.post("/api/v1/scans", json={"employee_id": "   "})
        assert response.status_code == 422


class TestSchedulesAndRecords:
    """Test schedule upsert and daily record endpoints."""

    async def test_put_schedule(self, client: AsyncClient, seeded):
        url = f"/api/v1/employees/{seeded}/schedules/2024-03-04"
        response = await client.put(url, json={"start_time": "08:00", "end_time": "17:00"})
        assert response.status_code == 200
        assert response.json()["start_time"] == "08:00:00"

        response = await client.put(url, json={"start_time": "09:00", "end_time": "18:00"})
        assert response.status_code == 200

        listing = await client.get(
            f"/api/v1/employees/{seeded}/schedules",
            params={"start": "2024-03-01", "end": "2024-03-15"},
        )
        assert listing.status_code == 200
        assert [s["start_time"] for s in listing.json()] == ["09:00:00"]

    async def test_schedule_rejects_inverted_times(self, client: AsyncClient, seeded):
        response = await client.put(
            f"/api/v1/employees/{seeded}/schedules/2024-03-04",
            json={"start_time": "17:00", "end_time": "08:00"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_schedule_rejects_malformed_time(self, client: AsyncClient, seeded):
        response = await client.put(
            f"/api/v1/employees/{seeded}/schedules/2024-03-04",
            json={"start_time": "8am", "end_time": "17:00"},
        )
        assert response.status_code == 422

    async def test_upcoming_schedules(self, client: AsyncClient, seeded):
        today = civil_date(datetime.now(pytz.utc))
        for offset in (-1, 0, 1, 2):
            day = (today + timedelta(days=offset)).isoformat()
            await client.put(
                f"/api/v1/employees/{seeded}/schedules/{day}",
                json={"start_time": "08:00", "end_time": "17:00"},
            )

        response = await client.get(
            f"/api/v1/employees/{seeded}/schedules/upcoming", params={"limit": 2}
        )
        assert response.status_code == 200
        assert [s["work_date"] for s in response.json()] == [
            today.isoformat(),
            (today + timedelta(days=1)).isoformat(),
        ]

    async def test_upcoming_schedules_unknown_employee(self, client: AsyncClient):
        response = await client.get("/api/v1/employees/NOPE/schedules/upcoming")
        assert response.status_code == 404
        assert response.json()["code"] == "EMPLOYEE_NOT_FOUND"

    async def test_daily_record(self, client: AsyncClient, session_factory, seeded):
        day = date(2024, 3, 4)
        async with session_factory() as session:
            for punch_type, hour in ((PunchType.AM_IN, 8), (PunchType.PM_OUT, 19)):
                session.add(
                    AttendanceLog(
                        employee_id=seeded,
                        timestamp=MANILA.localize(datetime.combine(day, time(hour))),
                        work_date=day,
                        punch_type=punch_type.value,
                    )
                )
            await session.commit()

        response = await client.get(f"/api/v1/employees/{seeded}/daily-records/2024-03-04")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "INCOMPLETE"
        assert data["arrival_status"] is None
        assert Decimal(data["hours_worked"]) == Decimal("10")

    async def test_daily_record_unknown_employee(self, client: AsyncClient):
        response = await client.get("/api/v1/employees/NOPE/daily-records/2024-03-04")
        assert response.status_code == 404


class TestPayroll:
    """Test payroll config and period report endpoints."""

    async def test_config_defaults(self, client: AsyncClient):
        response = await client.get("/api/v1/payroll/config")
        assert response.status_code == 200

        data = response.json()
        assert data["rates"] == {}
        assert data["grace_period_minutes"] == 15
        assert data["meal_allowance_eligible_positions"] == ["Branch Manager", "Team Leader"]

    async def test_config_update(self, client: AsyncClient):
        payload = {
            "rates": {"Team Leader|Cabanatuan": "600"},
            "grace_period_minutes": 10,
        }
        response = await client.put("/api/v1/payroll/config", json=payload)
        assert response.status_code == 200

        response = await client.get("/api/v1/payroll/config")
        data = response.json()
        assert Decimal(data["rates"]["Team Leader|Cabanatuan"]) == Decimal("600")
        assert data["grace_period_minutes"] == 10

    async def test_config_rejects_bad_rate_key(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/payroll/config", json={"rates": {"Team Leader": "600"}}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_period_report(self, client: AsyncClient, session_factory, seeded):
        await client.put(
            "/api/v1/payroll/config", json={"rates": {"Team Leader|Cabanatuan": "600"}}
        )
        day = date(2024, 3, 18)
        async with session_factory() as session:
            for punch_type, hour in zip(PunchType.sequence(), (8, 12, 13, 17)):
                session.add(
                    AttendanceLog(
                        employee_id=seeded,
                        timestamp=MANILA.localize(datetime.combine(day, time(hour))),
                        work_date=day,
                        punch_type=punch_type.value,
                    )
                )
            await session.commit()

        response = await client.get(
            f"/api/v1/employees/{seeded}/payroll",
            params={"year": 2024, "month": 3, "half": 2},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["employee_name"] == "Maria Santos"
        assert data["period_end"] == "2024-03-31"
        assert len(data["records"]) == 16
        slip = data["slip"]
        assert slip["days_present"] == 1
        assert slip["payout_date"] == "2024-03-30"
        assert slip["rate_source"] == "CONFIGURED"
        assert Decimal(slip["net_pay"]) == Decimal("1700.00")

    async def test_period_report_bad_half(self, client: AsyncClient, seeded):
        response = await client.get(
            f"/api/v1/employees/{seeded}/payroll",
            params={"year": 2024, "month": 3, "half": 3},
        )
        assert response.status_code == 422

    async def test_period_report_unknown_employee(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/employees/NOPE/payroll",
            params={"year": 2024, "month": 3, "half": 1},
        )
        assert response.status_code == 404

    async def test_period_run(self, client: AsyncClient, seeded):
        await client.put(
            "/api/v1/payroll/config", json={"rates": {"Regular Staff|Solano": "450"}}
        )
        created = await client.post(
            "/api/v1/employees",
            json={
                "employee_id": "EMP-002",
                "first_name": "Ana",
                "last_name": "Dela Cruz",
                "birthday": "1995-06-20",
                "position": "Regular Staff",
                "branch": "Solano",
            },
        )
        assert created.status_code == 201
        await client.post("/api/v1/employees/EMP-002/deactivate")

        response = await client.get(
            "/api/v1/payroll", params={"year": 2024, "month": 3, "half": 2}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["period_end"] == "2024-03-31"
        assert [e["employee_id"] for e in data["entries"]] == [seeded]
        assert data["entries"][0]["slip"]["rate_source"] == "DEFAULTED"
        # no rate for Team Leader|Cabanatuan; only the March birthday bonus remains
        assert Decimal(data["total_net_pay"]) == Decimal("1000.00")

    async def test_period_run_bad_month(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/payroll", params={"year": 2024, "month": 13, "half": 1}
        )
        assert response.status_code == 422


class TestEmployees:
    """Test the /api/v1/employees registry."""

    PAYLOAD = {
        "employee_id": "EMP-002",
        "first_name": "Ana",
        "last_name": "Dela Cruz",
        "birthday": "1995-06-20",
        "position": "Regular Staff",
        "branch": "Solano",
    }

    async def test_create_and_get(self, client: AsyncClient):
        response = await client.post("/api/v1/employees", json=self.PAYLOAD)
        assert response.status_code == 201
        data = response.json()
        assert data["is_active"] is True
        assert data["full_name"] == "Ana Dela Cruz"

        response = await client.get("/api/v1/employees/EMP-002")
        assert response.status_code == 200
        assert response.json()["branch"] == "Solano"

    async def test_create_duplicate(self, client: AsyncClient, seeded):
        response = await client.post(
            "/api/v1/employees", json={**self.PAYLOAD, "employee_id": seeded}
        )
        assert response.status_code == 409
        assert response.json()["code"] == "EMPLOYEE_EXISTS"

    async def test_create_requires_birthday(self, client: AsyncClient):
        payload = {k: v for k, v in self.PAYLOAD.items() if k != "birthday"}
        response = await client.post("/api/v1/employees", json=payload)
        assert response.status_code == 422

    async def test_list(self, client: AsyncClient, seeded):
        await client.post("/api/v1/employees", json=self.PAYLOAD)
        await client.post("/api/v1/employees/EMP-002/deactivate")

        everyone = await client.get("/api/v1/employees")
        active = await client.get("/api/v1/employees", params={"active_only": True})

        assert [e["employee_id"] for e in everyone.json()] == [seeded, "EMP-002"]
        assert [e["employee_id"] for e in active.json()] == [seeded]

    async def test_patch(self, client: AsyncClient, seeded):
        response = await client.patch(
            f"/api/v1/employees/{seeded}", json={"position": "Branch Manager"}
        )
        assert response.status_code == 200
        assert response.json()["position"] == "Branch Manager"
        assert response.json()["last_name"] == "Santos"

    async def test_patch_rejects_unknown_field(self, client: AsyncClient, seeded):
        response = await client.patch(f"/api/v1/employees/{seeded}", json={"employee_id": "X"})
        assert response.status_code == 422

    async def test_patch_rejects_blank_name(self, client: AsyncClient, seeded):
        response = await client.patch(f"/api/v1/employees/{seeded}", json={"first_name": " "})
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_deactivated_employee_cannot_scan(self, client: AsyncClient, seeded):
        response = await client.post(f"/api/v1/employees/{seeded}/deactivate")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = await client.post("/api/v1/scans", json={"employee_id": seeded})
        assert response.status_code == 404
        assert response.json()["code"] == "EMPLOYEE_INACTIVE"

        response = await client.post(f"/api/v1/employees/{seeded}/activate")
        assert response.json()["is_active"] is True
        response = await client.post("/api/v1/scans", json={"employee_id": seeded})
        assert response.status_code == 201

    async def test_unknown_employee(self, client: AsyncClient):
        response = await client.get("/api/v1/employees/NOPE")
        assert response.status_code == 404
        response = await client.post("/api/v1/employees/NOPE/activate")
        assert response.status_code == 404
