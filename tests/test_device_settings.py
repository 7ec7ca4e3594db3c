"""
Tests for per-device settings: general settings, LED, buzzer and WiFi.

These tests verify:
- Settings documents are created from defaults and persisted across requests
- Partial updates merge into nested settings
- Device actions validate their input and move the robot between modes
- Unknown devices are 404
"""

import pytest
from fastapi.testclient import TestClient

from lacr.models.robot import Robot
from lacr.services.device_settings import LED_PRESETS, deep_merge


def current_mode(client: TestClient, robot_id: str) -> str:
    return client.get(f"/esp32/status/{robot_id}").json()["robot"]["current_mode"]


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_dicts_merge(self):
        """Should keep sibling keys of nested dicts."""
        base = {"power": {"auto_sleep": True, "sleep_timeout": 30}, "theme": "light"}

        merged = deep_merge(base, {"power": {"sleep_timeout": 10}})

        assert merged == {"power": {"auto_sleep": True, "sleep_timeout": 10}, "theme": "light"}
        assert base["power"]["sleep_timeout"] == 30


class TestGeneralSettings:
    """Tests for /settings/{device_id}."""

    def test_defaults_on_first_read(self, client: TestClient, gem_robot: Robot):
        """Should create default settings named after the robot model."""
        response = client.get(f"/settings/{gem_robot.robot_id}")

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["device_name"] == "GEM"
        assert settings["time_zone"] == "UTC"
        assert settings["power"]["auto_sleep"] is True

    def test_unknown_device(self, client: TestClient):
        """Should return 404 for a device that is not registered."""
        response = client.get("/settings/ghost")

        assert response.status_code == 404
        assert response.json()["error"] == "Device not found"

    def test_partial_update_is_persisted(self, client: TestClient, gem_robot: Robot):
        """Should merge nested changes and keep them for the next read."""
        client.put(
            f"/settings/{gem_robot.robot_id}",
            json={"user_name": "Ana", "power": {"sleep_timeout": 10}},
        )

        settings = client.get(f"/settings/{gem_robot.robot_id}").json()["settings"]
        assert settings["user_name"] == "Ana"
        assert settings["power"]["sleep_timeout"] == 10
        assert settings["power"]["auto_sleep"] is True

    def test_invalid_time_zone(self, client: TestClient, gem_robot: Robot):
        """Should reject unknown time zones as 400."""
        response = client.put(f"/settings/{gem_robot.robot_id}", json={"time_zone": "Nowhere/Land"})

        assert response.status_code == 400

    def test_factory_reset(self, client: TestClient, gem_robot: Robot):
        """Should restore defaults and reset runtime state."""
        robot_id = gem_robot.robot_id
        client.put(f"/settings/{robot_id}", json={"user_name": "Ana"})
        client.post(f"/led/{robot_id}/settings", json={"brightness": 90})
        client.post(f"/wifi/{robot_id}/config", json={"ssid": "Home"})

        response = client.post(f"/settings/{robot_id}/factory-reset")

        assert response.status_code == 200
        assert response.json()["robot"]["status"] == "offline"
        assert client.get(f"/settings/{robot_id}").json()["settings"]["user_name"] == "User"
        assert client.get(f"/led/{robot_id}/settings").json()["settings"]["brightness"] == 50
        assert client.get(f"/wifi/{robot_id}/config").json()["wifi"]["ssid"] is None
        assert current_mode(client, robot_id) == "idle"

    def test_device_info(self, client: TestClient, gem_robot: Robot):
        """Should describe the device."""
        info = client.get(f"/settings/{gem_robot.robot_id}/info").json()["info"]

        assert info["device_id"] == gem_robot.robot_id
        assert info["model"] == "GEM"
        assert info["device_name"] == "GEM"

    def test_firmware_requires_url(self, client: TestClient, gem_robot: Robot):
        """Should return 400 without firmware_url."""
        response = client.post(f"/settings/{gem_robot.robot_id}/firmware", json={"version": "2.0"})

        assert response.status_code == 400
        assert response.json()["error"] == "Firmware URL is required"

    def test_firmware_update_sets_mode(self, client: TestClient, gem_robot: Robot):
        """Should put the robot in updating mode."""
        response = client.post(
            f"/settings/{gem_robot.robot_id}/firmware",
            json={"firmware_url": "https://example.com/fw.bin", "version": "2.0"},
        )

        assert response.status_code == 200
        assert response.json()["update"]["status"] == "downloading"
        assert current_mode(client, gem_robot.robot_id) == "updating"

    def test_firmware_status_follows_heartbeat(self, client: TestClient, gem_robot: Robot):
        """Should stay downloading until the robot reports the requested version."""
        robot_id = gem_robot.robot_id
        client.post(
            f"/settings/{robot_id}/firmware",
            json={"firmware_url": "https://example.com/fw.bin", "version": "2.0"},
        )

        client.post("/esp32/heartbeat", json={"robot_id": robot_id, "firmware_version": "1.0"})
        pending = client.get(f"/settings/{robot_id}/firmware/status").json()["update"]
        assert pending["status"] == "downloading"
        assert pending["target_version"] == "2.0"
        assert current_mode(client, robot_id) == "updating"

        client.post("/esp32/heartbeat", json={"robot_id": robot_id, "firmware_version": "2.0"})
        done = client.get(f"/settings/{robot_id}/firmware/status").json()["update"]
        assert done["status"] == "idle"
        assert done["current_version"] == "2.0"
        assert current_mode(client, robot_id) == "idle"

    def test_latest_firmware_ends_on_any_new_version(self, client: TestClient, gem_robot: Robot):
        """Should leave updating mode once a version other than the old one is reported."""
        robot_id = gem_robot.robot_id
        client.post("/esp32/heartbeat", json={"robot_id": robot_id, "firmware_version": "1"})
        client.post(f"/settings/{robot_id}/firmware", json={"firmware_url": "https://example.com/fw.bin"})

        client.post("/esp32/heartbeat", json={"robot_id": robot_id, "firmware_version": "2"})

        assert current_mode(client, robot_id) == "idle"

    def test_firmware_status_unknown_device(self, client: TestClient):
        assert client.get("/settings/ghost/firmware/status").status_code == 404


class TestLed:
    """Tests for /led/{device_id}/*."""

    def test_update_is_persisted(self, client: TestClient, gem_robot: Robot):
        """Should make an LED update visible on the next GET."""
        robot_id = gem_robot.robot_id
        client.post(f"/led/{robot_id}/settings", json={"brightness": 80, "color": {"r": 10, "g": 20, "b": 30}})

        settings = client.get(f"/led/{robot_id}/settings").json()["settings"]

        assert settings["brightness"] == 80
        assert settings["color"] == {"r": 10, "g": 20, "b": 30}
        assert current_mode(client, robot_id) == "lamp"

    def test_brightness_out_of_range(self, client: TestClient, gem_robot: Robot):
        """Should reject brightness above 100."""
        response = client.post(f"/led/{gem_robot.robot_id}/settings", json={"brightness": 101})

        assert response.status_code == 400

    def test_control_invalid_action(self, client: TestClient, gem_robot: Robot):
        """Should reject unknown control actions."""
        response = client.post(f"/led/{gem_robot.robot_id}/control", json={"action": "explode"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid action"

    def test_control_on_then_off(self, client: TestClient, gem_robot: Robot):
        """Should switch to lamp mode on 'on' and back to idle on 'off'."""
        robot_id = gem_robot.robot_id

        on = client.post(f"/led/{robot_id}/control", json={"action": "on"}).json()
        assert on["state"] == "on"
        assert on["brightness"] == 100
        assert current_mode(client, robot_id) == "lamp"

        off = client.post(f"/led/{robot_id}/control", json={"action": "off"}).json()
        assert off["state"] == "off"
        assert current_mode(client, robot_id) == "idle"
        assert client.get(f"/led/{robot_id}/settings").json()["settings"]["enabled"] is False

    @pytest.mark.parametrize("animation", ["sparkle", None])
    def test_invalid_animation(self, client: TestClient, gem_robot: Robot, animation):
        """Should reject unknown or missing animation types."""
        response = client.post(f"/led/{gem_robot.robot_id}/animation", json={"animation": animation})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid animation type"

    def test_set_animation(self, client: TestClient, gem_robot: Robot):
        """Should store the animation and its speed."""
        response = client.post(f"/led/{gem_robot.robot_id}/animation", json={"animation": "rainbow", "speed": 2})

        settings = response.json()["settings"]
        assert settings["animation"] == "rainbow"
        assert settings["animation_speed"] == 2.0

    def test_list_presets(self, client: TestClient, gem_robot: Robot):
        """Should list every built-in preset."""
        presets = client.get(f"/led/{gem_robot.robot_id}/presets").json()["presets"]

        assert {p["id"] for p in presets} == set(LED_PRESETS)

    def test_apply_preset(self, client: TestClient, gem_robot: Robot):
        """Should copy the preset into the LED settings."""
        robot_id = gem_robot.robot_id
        response = client.post(f"/led/{robot_id}/preset/night_mode")

        assert response.status_code == 200
        settings = client.get(f"/led/{robot_id}/settings").json()["settings"]
        assert settings["brightness"] == 20
        assert settings["animation"] == "fade"
        assert settings["active_preset"] == "night_mode"

    def test_manual_change_clears_preset(self, client: TestClient, gem_robot: Robot):
        """Should forget the active preset after a manual update."""
        robot_id = gem_robot.robot_id
        client.post(f"/led/{robot_id}/preset/red")
        client.post(f"/led/{robot_id}/settings", json={"brightness": 40})

        assert client.get(f"/led/{robot_id}/settings").json()["settings"]["active_preset"] is None

    def test_unknown_preset(self, client: TestClient, gem_robot: Robot):
        """Should return 404 for an unknown preset."""
        response = client.post(f"/led/{gem_robot.robot_id}/preset/disco")

        assert response.status_code == 404


class TestBuzzer:
    """Tests for /buzzer/{device_id}/*."""

    def test_default_settings(self, client: TestClient, gem_robot: Robot):
        """Should start enabled at volume 70 with the built-in patterns."""
        settings = client.get(f"/buzzer/{gem_robot.robot_id}/settings").json()["settings"]

        assert settings["enabled"] is True
        assert settings["volume"] == 70
        assert settings["patterns"]["alarm"]["frequency"] == 800

    def test_set_volume(self, client: TestClient, gem_robot: Robot):
        """Should store a volume inside 0-100."""
        response = client.post(f"/buzzer/{gem_robot.robot_id}/volume", json={"volume": 30})

        assert response.json()["settings"]["volume"] == 30

    def test_volume_out_of_range(self, client: TestClient, gem_robot: Robot):
        """Should reject a volume above 100."""
        response = client.post(f"/buzzer/{gem_robot.robot_id}/volume", json={"volume": 101})

        assert response.status_code == 400

    def test_play_and_stop(self, client: TestClient, gem_robot: Robot):
        """Should enter alarm mode while playing and leave it on stop."""
        robot_id = gem_robot.robot_id

        play = client.post(f"/buzzer/{robot_id}/play", json={"pattern": "alarm"})
        assert play.status_code == 200
        assert play.json()["command"]["frequency"] == 800
        assert client.get(f"/buzzer/{robot_id}/status").json()["status"]["is_playing"] is True

        client.post(f"/buzzer/{robot_id}/stop")
        assert client.get(f"/buzzer/{robot_id}/status").json()["status"]["is_playing"] is False

    def test_play_custom_tone(self, client: TestClient, gem_robot: Robot):
        """Should play an ad-hoc tone from custom parameters."""
        response = client.post(
            f"/buzzer/{gem_robot.robot_id}/play",
            json={"custom_frequency": 440, "custom_duration": 250},
        )

        command = response.json()["command"]
        assert command["pattern"] == "custom"
        assert command["frequency"] == 440
        assert command["repeat"] == 1

    def test_play_requires_pattern_or_tone(self, client: TestClient, gem_robot: Robot):
        """Should return 400 with neither a pattern nor custom parameters."""
        response = client.post(f"/buzzer/{gem_robot.robot_id}/play", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Either pattern or custom parameters required"

    def test_play_unknown_pattern(self, client: TestClient, gem_robot: Robot):
        """Should return 400 for an unknown pattern name."""
        response = client.post(f"/buzzer/{gem_robot.robot_id}/play", json={"pattern": "kazoo"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid pattern"

    def test_test_tone_keeps_mode(self, client: TestClient, gem_robot: Robot):
        """Should beep once without entering alarm mode."""
        response = client.post(f"/buzzer/{gem_robot.robot_id}/test", json={})

        assert response.json()["command"]["frequency"] == 800
        assert current_mode(client, gem_robot.robot_id) == "idle"

    def test_custom_pattern_lifecycle(self, client: TestClient, gem_robot: Robot):
        """Should persist a custom pattern, list it and play it by name."""
        robot_id = gem_robot.robot_id
        body = {"name": "doorbell", "frequency": 660, "duration": 150, "repeat": 2, "interval": 100}

        created = client.post(f"/buzzer/{robot_id}/patterns", json=body)
        assert created.status_code == 201
        assert created.json()["pattern"]["id"].startswith("custom_")

        patterns = client.get(f"/buzzer/{robot_id}/patterns").json()["patterns"]
        assert "doorbell" in [p["name"] for p in patterns]
        assert "Alarm" in [p["name"] for p in patterns]

        play = client.post(f"/buzzer/{robot_id}/play", json={"pattern": "doorbell"})
        assert play.json()["command"]["frequency"] == 660

    def test_duplicate_custom_pattern(self, client: TestClient, gem_robot: Robot):
        """Should refuse a second pattern with the same name."""
        body = {"name": "doorbell", "frequency": 660, "duration": 150}
        client.post(f"/buzzer/{gem_robot.robot_id}/patterns", json=body)

        response = client.post(f"/buzzer/{gem_robot.robot_id}/patterns", json=body)

        assert response.status_code == 400


class TestWifi:
    """Tests for /wifi/{device_id}/*."""

    def test_initial_status(self, client: TestClient, gem_robot: Robot):
        """Should report no network before configuration."""
        wifi = client.get(f"/wifi/{gem_robot.robot_id}/config").json()["wifi"]

        assert wifi == {"connected": False, "ssid": None, "signal_strength": None}

    def test_configure(self, client: TestClient, gem_robot: Robot):
        """Should store the SSID, never the password, and enter wifi_setup."""
        response = client.post(
            f"/wifi/{gem_robot.robot_id}/config",
            json={"ssid": "HomeNet", "password": "hunter22"},
        )

        assert response.status_code == 200
        assert response.json()["wifi"]["ssid"] == "HomeNet"
        assert response.json()["wifi"]["connected"] is False
        assert "hunter22" not in response.text
        assert current_mode(client, gem_robot.robot_id) == "wifi_setup"

    def test_disconnect(self, client: TestClient, gem_robot: Robot):
        """Should clear the network."""
        client.post(f"/wifi/{gem_robot.robot_id}/config", json={"ssid": "HomeNet"})

        wifi = client.post(f"/wifi/{gem_robot.robot_id}/disconnect").json()["wifi"]

        assert wifi["ssid"] is None

    def test_unknown_device(self, client: TestClient):
        """Should return 404 for an unknown device."""
        assert client.post("/wifi/ghost/config", json={"ssid": "HomeNet"}).status_code == 404

    def test_heartbeat_reports_connection(self, client: TestClient, gem_robot: Robot):
        """Should show the connection the robot reports after joining the network."""
        robot_id = gem_robot.robot_id
        client.post(f"/wifi/{robot_id}/config", json={"ssid": "HomeNet"})

        client.post(
            "/esp32/heartbeat",
            json={"robot_id": robot_id, "wifi_connected": True, "wifi_signal_strength": -52},
        )

        wifi = client.get(f"/wifi/{robot_id}/config").json()["wifi"]
        assert wifi == {"connected": True, "ssid": "HomeNet", "signal_strength": -52}
        assert current_mode(client, robot_id) == "idle"

    def test_heartbeat_reports_lost_connection(self, client: TestClient, gem_robot: Robot):
        """Should clear the signal strength when the robot reports it is offline."""
        robot_id = gem_robot.robot_id
        client.post(
            "/esp32/heartbeat",
            json={"robot_id": robot_id, "wifi_connected": True, "wifi_ssid": "HomeNet", "wifi_signal_strength": -60},
        )

        client.post("/esp32/heartbeat", json={"robot_id": robot_id, "wifi_connected": False})

        wifi = client.get(f"/wifi/{robot_id}/config").json()["wifi"]
        assert wifi == {"connected": False, "ssid": "HomeNet", "signal_strength": None}
