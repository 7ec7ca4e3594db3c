"""
Tests for alarms: the next-alarm computation and the /alarms endpoints.
"""

import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from lacr.models.alarm import Alarm, no_repeat
from lacr.services.alarms import next_alarm, next_occurrence

# Monday 2026-10-19, 08:00 UTC
MONDAY_8AM = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def make_alarm(hour: int, minute: int = 0, enabled: bool = True, days: tuple = ()) -> Alarm:
    repeat = no_repeat()
    for day in days:
        repeat[day] = True
    return Alarm(device_id="D1", hour=hour, minute=minute, enabled=enabled, repeat=repeat)


class TestNextOccurrence:
    """Tests for next_occurrence (pure, no database)."""

    def test_one_shot_later_today(self):
        """Should ring today when the time is still ahead."""
        fires_at = next_occurrence(make_alarm(9, 30), MONDAY_8AM)

        assert fires_at == datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)

    def test_one_shot_already_passed(self):
        """Should never ring once today's time has passed."""
        assert next_occurrence(make_alarm(7), MONDAY_8AM) is None

    def test_disabled_alarm(self):
        """Should ignore disabled alarms."""
        assert next_occurrence(make_alarm(9, enabled=False), MONDAY_8AM) is None

    def test_repeating_later_in_week(self):
        """Should ring on the next matching weekday."""
        fires_at = next_occurrence(make_alarm(6, days=("wednesday",)), MONDAY_8AM)

        assert fires_at == datetime(2026, 10, 21, 6, 0, tzinfo=timezone.utc)

    def test_repeating_today_already_passed(self):
        """Should roll a weekly alarm that already rang today to next week."""
        fires_at = next_occurrence(make_alarm(7, days=("monday",)), MONDAY_8AM)

        assert fires_at == datetime(2026, 10, 26, 7, 0, tzinfo=timezone.utc)

    def test_repeating_today_still_ahead(self):
        """Should ring today when today is a repeat day and the time is ahead."""
        fires_at = next_occurrence(make_alarm(20, days=("monday", "friday")), MONDAY_8AM)

        assert fires_at == datetime(2026, 10, 19, 20, 0, tzinfo=timezone.utc)

    def test_uses_callers_time_zone(self):
        """Should read alarm times as wall-clock time in now's zone."""
        now = MONDAY_8AM.astimezone(ZoneInfo("America/New_York"))  # 04:00 local
        fires_at = next_occurrence(make_alarm(6), now)

        assert fires_at.hour == 6
        assert fires_at.tzinfo == now.tzinfo
        assert fires_at > now


class TestNextAlarm:
    """Tests for next_alarm."""

    def test_picks_earliest(self):
        """Should choose the alarm that rings soonest, not the earliest hour."""
        tuesday_early = make_alarm(5, days=("tuesday",))
        today_late = make_alarm(22)

        alarm, fires_at = next_alarm([tuesday_early, today_late], MONDAY_8AM)

        assert alarm is today_late
        assert fires_at.day == 19

    def test_none_when_nothing_rings(self):
        """Should return (None, None) without a future alarm."""
        assert next_alarm([make_alarm(7), make_alarm(9, enabled=False)], MONDAY_8AM) == (None, None)


class TestAlarmEndpoints:
    """Tests for /alarms/{device_id}."""

    def test_create_alarm(self, client: TestClient):
        """Should create an alarm with defaults for omitted fields."""
        response = client.post("/alarms/D1", json={"label": "Wake up", "time": {"hour": 7, "minute": 30}})

        assert response.status_code == 201
        alarm = response.json()["alarm"]
        assert alarm["label"] == "Wake up"
        assert alarm["time"] == {"hour": 7, "minute": 30}
        assert alarm["enabled"] is True
        assert alarm["snooze_duration"] == 5
        assert not any(alarm["repeat"].values())

    def test_create_invalid_time(self, client: TestClient):
        """Should reject an hour outside 0-23 as 400."""
        response = client.post("/alarms/D1", json={"time": {"hour": 24, "minute": 0}})

        assert response.status_code == 400

    def test_list_sorted_by_time(self, client: TestClient):
        """Should list a device's alarms by time of day."""
        client.post("/alarms/D1", json={"label": "late", "time": {"hour": 21, "minute": 0}})
        client.post("/alarms/D1", json={"label": "early", "time": {"hour": 6, "minute": 15}})
        client.post("/alarms/D2", json={"label": "other device", "time": {"hour": 5, "minute": 0}})

        alarms = client.get("/alarms/D1").json()["alarms"]

        assert [a["label"] for a in alarms] == ["early", "late"]

    def test_update_alarm(self, client: TestClient):
        """Should change only the supplied fields."""
        alarm_id = client.post("/alarms/D1", json={"time": {"hour": 7, "minute": 0}}).json()["alarm"]["id"]

        response = client.put(
            f"/alarms/D1/{alarm_id}",
            json={"time": {"hour": 8, "minute": 45}, "repeat": {"saturday": True}},
        )

        assert response.status_code == 200
        alarm = response.json()["alarm"]
        assert alarm["time"] == {"hour": 8, "minute": 45}
        assert alarm["repeat"]["saturday"] is True
        assert alarm["label"] == "Alarm"

    def test_toggle_alarm(self, client: TestClient):
        """Should flip enabled."""
        alarm_id = client.post("/alarms/D1", json={"time": {"hour": 7, "minute": 0}}).json()["alarm"]["id"]

        response = client.patch(f"/alarms/D1/{alarm_id}/toggle")

        assert response.json()["alarm"]["enabled"] is False

    def test_delete_alarm(self, client: TestClient):
        """Should remove the alarm."""
        alarm_id = client.post("/alarms/D1", json={"time": {"hour": 7, "minute": 0}}).json()["alarm"]["id"]

        assert client.delete(f"/alarms/D1/{alarm_id}").status_code == 200
        assert client.get("/alarms/D1").json()["alarms"] == []

    def test_unknown_alarm(self, client: TestClient):
        """Should return 404 for an alarm id that does not exist."""
        response = client.patch(f"/alarms/D1/{uuid.uuid4()}/toggle")

        assert response.status_code == 404
        assert response.json()["error"] == "Alarm not found"

    def test_alarm_of_other_device(self, client: TestClient):
        """Should not reach another device's alarm."""
        alarm_id = client.post("/alarms/D1", json={"time": {"hour": 7, "minute": 0}}).json()["alarm"]["id"]

        assert client.delete(f"/alarms/D2/{alarm_id}").status_code == 404


class TestNextAlarmEndpoint:
    """Tests for GET /alarms/{device_id}/next."""

    def test_no_alarms(self, client: TestClient):
        """Should return nulls when nothing will ring."""
        data = client.get("/alarms/D1/next").json()

        assert data["next_alarm"] is None
        assert data["time_until"] is None

    def test_daily_alarm(self, client: TestClient):
        """Should ring within the next 24 hours for an every-day alarm."""
        every_day = {day: True for day in no_repeat()}
        client.post("/alarms/D1", json={"time": {"hour": 7, "minute": 0}, "repeat": every_day})

        data = client.get("/alarms/D1/next", params={"tz": "Europe/Madrid"}).json()

        assert data["next_alarm"]["time"] == {"hour": 7, "minute": 0}
        assert 0 < data["time_until"] <= 24 * 60 * 60 * 1000

    def test_unknown_time_zone(self, client: TestClient):
        """Should reject an unknown tz as 400."""
        response = client.get("/alarms/D1/next", params={"tz": "Mars/Olympus"})

        assert response.status_code == 400
