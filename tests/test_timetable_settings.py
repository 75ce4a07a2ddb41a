from httpx import AsyncClient
from sqlalchemy import select

from classboard.core.models import FixedTimeSlot

from conftest import CLASS_ID

BASE = f"/api/v1/classes/{CLASS_ID}/timetable"


async def test_first_read_seeds_defaults(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/settings")
    assert response.status_code == 200
    data = response.json()
    assert data["number_of_periods"] == 7
    assert data["active_days"] == ["MON", "TUE", "WED", "THU", "FRI"]

    fixed = (await client.get(f"{BASE}/fixed")).json()
    assert len(fixed) == 35
    assert fixed[0]["id"] == "MON_1"
    assert all(s["subject_id"] is None for s in fixed)


async def test_increasing_periods_adds_empty_slots(client: AsyncClient, db_session) -> None:
    await client.get(f"{BASE}/settings")
    response = await client.patch(f"{BASE}/settings", json={"number_of_periods": 9})
    assert response.status_code == 200
    data = response.json()
    assert data["settings"]["number_of_periods"] == 9
    assert data["slots_created"] == 2 * 5
    assert data["slots_deleted"] == 0

    new_slots = (
        await db_session.execute(select(FixedTimeSlot).where(FixedTimeSlot.class_id == CLASS_ID, FixedTimeSlot.period > 7))
    ).scalars().all()
    assert len(new_slots) == 10
    assert all(s.subject_id is None for s in new_slots)


async def test_decreasing_periods_removes_slots(client: AsyncClient, db_session) -> None:
    await client.get(f"{BASE}/settings")
    await client.put(f"{BASE}/fixed", json={"slots": [{"day": "MON", "period": 7, "subject_id": "music"}]})
    response = await client.patch(f"{BASE}/settings", json={"number_of_periods": 5})
    assert response.json()["slots_deleted"] == 2 * 5

    remaining = (await db_session.execute(select(FixedTimeSlot.period).where(FixedTimeSlot.class_id == CLASS_ID))).scalars().all()
    assert max(remaining) == 5


async def test_changing_active_days_reshapes_grid(client: AsyncClient) -> None:
    await client.get(f"{BASE}/settings")
    response = await client.patch(f"{BASE}/settings", json={"active_days": ["SAT", "MON"]})
    assert response.status_code == 200
    assert response.json()["settings"]["active_days"] == ["MON", "SAT"]

    days = {s["day"] for s in (await client.get(f"{BASE}/fixed")).json()}
    assert days == {"MON", "SAT"}


async def test_invalid_period_count_is_rejected(client: AsyncClient) -> None:
    response = await client.patch(f"{BASE}/settings", json={"number_of_periods": 13})
    assert response.status_code == 422
    assert response.json()["code"] == "validation"


async def test_empty_active_days_is_rejected(client: AsyncClient) -> None:
    response = await client.patch(f"{BASE}/settings", json={"active_days": []})
    assert response.status_code == 422


async def test_classes_are_isolated(client: AsyncClient) -> None:
    await client.patch(f"{BASE}/settings", json={"number_of_periods": 3})
    other = await client.get("/api/v1/classes/class-3b/timetable/settings")
    assert other.json()["number_of_periods"] == 7
