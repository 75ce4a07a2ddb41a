from datetime import date

from httpx import AsyncClient

from classboard.core.models import SchoolEvent, Subject

from conftest import CLASS_ID, NEXT_MONDAY

BASE = f"/api/v1/classes/{CLASS_ID}/timetable"
DAY = NEXT_MONDAY.isoformat()


async def _setup(client: AsyncClient) -> None:
    await client.get(f"{BASE}/settings")
    await client.put(
        f"{BASE}/fixed",
        json={"slots": [{"day": "MON", "period": 1, "subject_id": "math"}, {"day": "MON", "period": 2, "subject_id": "art"}]},
    )


async def test_explicit_none_round_trip(client: AsyncClient) -> None:
    await _setup(client)
    response = await client.put(f"{BASE}/daily", json={"date": DAY, "period": 2, "subject_id_override": ""})
    assert response.status_code == 200
    saved = response.json()
    assert saved["id"] == f"{DAY}_2"
    assert saved["selection_mode"] == "NONE"
    assert saved["subject_id_override"] == ""

    day = (await client.get(f"{BASE}/daily/{DAY}/resolved")).json()
    slot = day["slots"][1]
    assert slot["subject_id"] is None
    assert slot["fixed_subject_id"] == "art"
    assert slot["changed_from_fixed"] is True


async def test_tagged_selection_with_note(client: AsyncClient) -> None:
    await _setup(client)
    payload = {
        "date": DAY,
        "period": 1,
        "selection": {"mode": "SUBJECT", "subject_id": "pe"},
        "text": "Sports day rehearsal",
        "show_on_calendar": True,
    }
    await client.put(f"{BASE}/daily", json=payload)

    overrides = (await client.get(f"{BASE}/daily/{DAY}")).json()
    first = next(o for o in overrides if o["period"] == 1)
    assert first["subject_id"] == "pe"
    assert first["text"] == "Sports day rehearsal"
    assert first["is_manually_cleared"] is False

    day = (await client.get(f"{BASE}/daily/{DAY}/resolved")).json()
    assert day["weekday"] == "MON"
    assert day["is_active_day"] is True
    assert day["slots"][0]["subject_id"] == "pe"
    assert day["slots"][0]["text"] == "Sports day rehearsal"
    assert day["slots"][0]["show_on_calendar"] is True


async def test_inherit_selection_follows_fixed(client: AsyncClient) -> None:
    await _setup(client)
    await client.put(f"{BASE}/daily", json={"date": DAY, "period": 1, "selection": {"mode": "INHERIT"}, "text": "Quiz"})
    day = (await client.get(f"{BASE}/daily/{DAY}/resolved")).json()
    assert day["slots"][0]["subject_id"] == "math"
    assert day["slots"][0]["changed_from_fixed"] is False


async def test_inconsistent_selection_is_rejected(client: AsyncClient) -> None:
    response = await client.put(f"{BASE}/daily", json={"date": DAY, "period": 1, "selection": {"mode": "SUBJECT"}})
    assert response.status_code == 422
    assert response.json()["code"] == "validation"


async def test_period_out_of_range_is_rejected(client: AsyncClient) -> None:
    response = await client.put(f"{BASE}/daily", json={"date": DAY, "period": 13, "subject_id_override": "math"})
    assert response.status_code == 422


async def test_clear_resets_to_template_and_sets_guard(client: AsyncClient) -> None:
    await _setup(client)
    await client.put(
        f"{BASE}/daily",
        json={"date": DAY, "period": 1, "subject_id_override": "pe", "text": "Gym", "show_on_calendar": True},
    )

    response = await client.post(f"{BASE}/daily/{DAY}/1/clear")

    cleared = response.json()
    assert cleared["is_manually_cleared"] is True
    assert cleared["subject_id_override"] == "math"
    assert cleared["text"] == ""
    assert cleared["show_on_calendar"] is False

    # Saving again lifts the guard.
    saved = (await client.put(f"{BASE}/daily", json={"date": DAY, "period": 1, "subject_id_override": "pe"})).json()
    assert saved["is_manually_cleared"] is False


async def test_revert_matches_clear(client: AsyncClient) -> None:
    await _setup(client)
    await client.put(f"{BASE}/daily", json={"date": DAY, "period": 2, "subject_id_override": "music"})
    reverted = (await client.post(f"{BASE}/daily/{DAY}/2/revert")).json()
    assert reverted["is_manually_cleared"] is True
    assert reverted["subject_id_override"] == "art"

    logs = (await client.get(f"/api/v1/classes/{CLASS_ID}/logs")).json()
    assert logs[0]["action"] == "revert_daily_override"


async def test_delete_override(client: AsyncClient) -> None:
    await _setup(client)
    response = await client.delete(f"{BASE}/daily/{DAY}/1")
    assert response.status_code == 204

    missing = await client.delete(f"{BASE}/daily/{DAY}/1")
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


async def test_inactive_day_resolves_empty(client: AsyncClient) -> None:
    day = (await client.get(f"{BASE}/daily/2026-10-18/resolved")).json()
    assert day["is_active_day"] is False
    assert day["slots"] == []


async def test_calendar_lists_events_and_flagged_notices(client: AsyncClient, db_session) -> None:
    await _setup(client)
    db_session.add_all(
        [
            SchoolEvent(id="ev-1", class_id=CLASS_ID, title="Field trip", start_date=date(2026, 10, 20)),
            SchoolEvent(
                id="ev-2",
                class_id=CLASS_ID,
                title="Exam week",
                start_date=date(2026, 10, 10),
                end_date=date(2026, 10, 16),
            ),
            SchoolEvent(id="ev-3", class_id=CLASS_ID, title="Winter break", start_date=date(2026, 12, 24)),
        ]
    )
    await db_session.commit()
    await client.put(
        f"{BASE}/daily",
        json={"date": DAY, "period": 2, "subject_id_override": "", "text": "Assembly", "show_on_calendar": True},
    )
    await client.put(f"{BASE}/daily", json={"date": DAY, "period": 1, "text": "Quiz"})

    response = await client.get(f"{BASE}/calendar", params={"start": "2026-10-14", "end": "2026-10-31"})

    data = response.json()
    assert [e["title"] for e in data["events"]] == ["Exam week", "Field trip"]
    assert data["notices"] == [{"date": DAY, "period": 2, "subject_id": None, "text": "Assembly"}]


async def test_calendar_rejects_reversed_range(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/calendar", params={"start": "2026-10-31", "end": "2026-10-01"})
    assert response.status_code == 422


async def test_subjects_are_listed_by_name(client: AsyncClient, db_session) -> None:
    db_session.add_all(
        [
            Subject(id="s-2", class_id=CLASS_ID, name="Science"),
            Subject(id="s-1", class_id=CLASS_ID, name="Art", teacher_name="Ms. Ito"),
            Subject(id="s-3", class_id="other", name="Music"),
        ]
    )
    await db_session.commit()
    subjects = (await client.get(f"/api/v1/classes/{CLASS_ID}/subjects")).json()
    assert [s["name"] for s in subjects] == ["Art", "Science"]
    assert subjects[0]["teacher_name"] == "Ms. Ito"
