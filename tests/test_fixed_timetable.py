from httpx import AsyncClient
from sqlalchemy import select

from classboard.core.models import AuditLog

from conftest import CLASS_ID

BASE = f"/api/v1/classes/{CLASS_ID}/timetable"

GRID = {
    "slots": [
        {"day": "MON", "period": 1, "subject_id": "math"},
        {"day": "MON", "period": 2, "subject_id": "english"},
        {"day": "TUE", "period": 1, "subject_id": ""},
    ]
}


async def test_batch_update_writes_changed_slots(client: AsyncClient) -> None:
    await client.get(f"{BASE}/settings")
    response = await client.put(f"{BASE}/fixed", json=GRID, headers={"X-Actor-Id": "teacher-1"})
    assert response.status_code == 200
    data = response.json()
    # TUE/1 already had no subject.
    assert data["slots_written"] == 2
    assert data["changed"] is True

    fixed = {s["id"]: s["subject_id"] for s in (await client.get(f"{BASE}/fixed")).json()}
    assert fixed["MON_1"] == "math"
    assert fixed["MON_2"] == "english"
    assert fixed["TUE_1"] is None


async def test_same_grid_twice_is_a_no_op(client: AsyncClient, db_session) -> None:
    await client.put(f"{BASE}/fixed", json=GRID)
    logs_before = len((await db_session.execute(select(AuditLog.id))).scalars().all())

    response = await client.put(f"{BASE}/fixed", json=GRID)

    data = response.json()
    assert data["changed"] is False
    assert data["slots_written"] == 0
    assert data["propagation"] is None
    logs_after = len((await db_session.execute(select(AuditLog.id))).scalars().all())
    assert logs_after == logs_before


async def test_single_slot_update(client: AsyncClient) -> None:
    response = await client.put(f"{BASE}/fixed/WED/3", json={"subject_id": "science"})
    assert response.status_code == 200
    assert response.json()["slots_written"] == 1


async def test_slot_outside_grid_is_rejected(client: AsyncClient) -> None:
    response = await client.put(f"{BASE}/fixed", json={"slots": [{"day": "SUN", "period": 1, "subject_id": "math"}]})
    assert response.status_code == 422
    assert "SUN_1" in response.json()["detail"]


async def test_reset_clears_assigned_slots(client: AsyncClient) -> None:
    await client.put(f"{BASE}/fixed", json=GRID)
    response = await client.post(f"{BASE}/fixed/reset")
    assert response.json()["slots_written"] == 2
    assert all(s["subject_id"] is None for s in (await client.get(f"{BASE}/fixed")).json())

    again = await client.post(f"{BASE}/fixed/reset")
    assert again.json()["changed"] is False


async def test_mutations_are_audited_with_actor(client: AsyncClient) -> None:
    await client.put(f"{BASE}/fixed", json=GRID, headers={"X-Actor-Id": "teacher-1"})
    logs = (await client.get(f"/api/v1/classes/{CLASS_ID}/logs")).json()
    entry = next(e for e in logs if e["action"] == "batch_update_fixed_timetable")
    assert entry["actor_id"] == "teacher-1"
    assert {"id": "MON_1", "subject_id": "math"} in entry["details"]["after"]
    assert any(e["action"] == "apply_fixed_timetable_future" for e in logs)
