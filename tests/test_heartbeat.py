"""
Tests for heart-rate telemetry (/heartbeat/{device_id}/*).
"""

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from lacr.core.clock import utcnow
from lacr.models.heartbeat import HeartbeatReading
from lacr.services.heartbeat import zone_percentages


class TestZonePercentages:
    """Tests for zone_percentages."""

    def test_average_inside_cardio(self):
        """Should fill fat burn, partly fill cardio and leave peak empty."""
        zones = zone_percentages(77.5)

        assert zones["fat_burn"]["percentage"] == 100.0
        assert zones["cardio"]["percentage"] == 50.0
        assert zones["peak"]["percentage"] == 0.0


class TestRecordReading:
    """Tests for POST /heartbeat/{device_id}."""

    def test_record_with_session(self, client: TestClient):
        """Should store the reading under the given session."""
        response = client.post("/heartbeat/D1", json={"bpm": 72, "session_id": "s1"})

        assert response.status_code == 201
        reading = response.json()["reading"]
        assert reading["bpm"] == 72
        assert reading["session_id"] == "s1"
        assert reading["quality"] == "good"

    def test_record_generates_session_id(self, client: TestClient):
        """Should give a reading without session_id a fresh session."""
        reading = client.post("/heartbeat/D1", json={"bpm": 72}).json()["reading"]

        assert reading["session_id"].startswith("session_")

    def test_bpm_out_of_range(self, client: TestClient):
        """Should reject bpm outside 40-200 as 400."""
        assert client.post("/heartbeat/D1", json={"bpm": 39}).status_code == 400
        assert client.post("/heartbeat/D1", json={"bpm": 201}).status_code == 400


class TestListReadings:
    """Tests for GET /heartbeat/{device_id} and /latest."""

    def test_list_newest_first_with_limit(self, client: TestClient, db: Session):
        """Should return the newest readings first, up to limit."""
        now = utcnow()
        for minutes, bpm in ((3, 60), (2, 70), (1, 80)):
            db.add(HeartbeatReading(device_id="D1", bpm=bpm, session_id="s1",
                                    timestamp=now - timedelta(minutes=minutes)))
        db.commit()

        readings = client.get("/heartbeat/D1", params={"limit": 2}).json()["readings"]

        assert [r["bpm"] for r in readings] == [80, 70]

    def test_list_filters_by_session(self, client: TestClient):
        """Should only return the requested session's readings."""
        client.post("/heartbeat/D1", json={"bpm": 60, "session_id": "a"})
        client.post("/heartbeat/D1", json={"bpm": 90, "session_id": "b"})

        readings = client.get("/heartbeat/D1", params={"session_id": "b"}).json()["readings"]

        assert [r["bpm"] for r in readings] == [90]

    def test_latest_without_readings(self, client: TestClient):
        """Should return 404 when the device has no readings."""
        response = client.get("/heartbeat/D1/latest")

        assert response.status_code == 404
        assert response.json()["error"] == "No heartbeat readings found"


class TestStats:
    """Tests for GET /heartbeat/{device_id}/stats."""

    def test_stats_over_last_day(self, client: TestClient, db: Session):
        """Should aggregate only readings inside the period."""
        now = utcnow()
        db.add_all([
            HeartbeatReading(device_id="D1", bpm=60, session_id="s", timestamp=now - timedelta(hours=1)),
            HeartbeatReading(device_id="D1", bpm=81, session_id="s", timestamp=now - timedelta(hours=2)),
            HeartbeatReading(device_id="D1", bpm=150, session_id="s", timestamp=now - timedelta(days=3)),
        ])
        db.commit()

        stats = client.get("/heartbeat/D1/stats", params={"period": "24h"}).json()["stats"]

        assert stats["count"] == 2
        assert stats["avg_bpm"] == 70.5
        assert stats["min_bpm"] == 60
        assert stats["max_bpm"] == 81
        assert set(stats["zones"]) == {"fat_burn", "cardio", "peak"}

    def test_stats_without_readings(self, client: TestClient):
        """Should report zeros and no zones."""
        stats = client.get("/heartbeat/D1/stats").json()["stats"]

        assert stats["count"] == 0
        assert stats["avg_bpm"] == 0.0
        assert stats["zones"] is None

    def test_stats_unknown_period(self, client: TestClient):
        """Should reject periods other than 24h, 7d and 30d."""
        assert client.get("/heartbeat/D1/stats", params={"period": "1y"}).status_code == 400


class TestSessionsAndTrends:
    """Tests for sessions, trends and monitoring sessions."""

    def test_sessions_summary(self, client: TestClient):
        """Should summarize each session separately."""
        for bpm in (60, 80):
            client.post("/heartbeat/D1", json={"bpm": bpm, "session_id": "a"})
        client.post("/heartbeat/D1", json={"bpm": 100, "session_id": "b"})

        sessions = {s["session_id"]: s for s in client.get("/heartbeat/D1/sessions").json()["sessions"]}

        assert sessions["a"]["reading_count"] == 2
        assert sessions["a"]["avg_bpm"] == 70.0
        assert sessions["b"]["max_bpm"] == 100

    def test_trends_group_by_day(self, client: TestClient, db: Session):
        """Should produce one entry per day, oldest first."""
        now = utcnow()
        db.add_all([
            HeartbeatReading(device_id="D1", bpm=60, session_id="s", timestamp=now - timedelta(days=2)),
            HeartbeatReading(device_id="D1", bpm=70, session_id="s", timestamp=now),
            HeartbeatReading(device_id="D1", bpm=90, session_id="s", timestamp=now),
        ])
        db.commit()

        trends = client.get("/heartbeat/D1/trends", params={"days": 7}).json()["trends"]

        assert len(trends) == 2
        assert trends[0]["date"] < trends[1]["date"]
        assert trends[1]["avg_bpm"] == 80.0
        assert trends[1]["count"] == 2

    def test_monitoring_session_round_trip(self, client: TestClient):
        """Should hand out a session id and summarize it on stop."""
        session_id = client.post("/heartbeat/D1/session/start").json()["session_id"]
        client.post("/heartbeat/D1", json={"bpm": 64, "session_id": session_id})
        client.post("/heartbeat/D1", json={"bpm": 76, "session_id": session_id})

        response = client.post("/heartbeat/D1/session/stop", json={"session_id": session_id})

        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["reading_count"] == 2
        assert stats["avg_bpm"] == 70.0

    def test_stop_without_session_id(self, client: TestClient):
        """Should return 400 without a session id."""
        response = client.post("/heartbeat/D1/session/stop", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Session ID is required"


class TestDeleteReadings:
    """Tests for DELETE /heartbeat/{device_id}."""

    def test_delete_one_session(self, client: TestClient):
        """Should delete only the given session and report the count."""
        client.post("/heartbeat/D1", json={"bpm": 60, "session_id": "a"})
        client.post("/heartbeat/D1", json={"bpm": 61, "session_id": "a"})
        client.post("/heartbeat/D1", json={"bpm": 90, "session_id": "b"})

        response = client.delete("/heartbeat/D1", params={"session_id": "a"})

        assert response.json()["deleted_count"] == 2
        remaining = client.get("/heartbeat/D1").json()["readings"]
        assert [r["session_id"] for r in remaining] == ["b"]
