"""
Device settings service - general, LED and buzzer settings plus WiFi status.

Settings documents live in device_settings, one row per (device, kind),
created from schema defaults on first access and validated against the
kind's pydantic model on every write. WiFi status lives on the robot row.
"""

import logging
import uuid
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lacr.core.clock import as_utc, utcnow
from lacr.core.errors import NotFound, ValidationError
from lacr.models.device_settings import DeviceSettings, SettingsKind
from lacr.models.robot import Robot, RobotMode, RobotStatus
from lacr.schemas.settings import (
    VALID_ANIMATIONS,
    BuzzerPattern,
    BuzzerSettings,
    CustomBuzzerPattern,
    CustomPatternCreate,
    GeneralSettings,
    LedPreset,
    LedSettings,
    RGBColor,
)

logger = logging.getLogger("lacr.services.device_settings")

# ---------------------------------------------------------------------------
# SCHEMA REGISTRY
# ---------------------------------------------------------------------------
# Bump CURRENT_SCHEMA_VERSION when a settings model changes shape; rows with
# an older version are re-validated (new fields take defaults) on next read.
CURRENT_SCHEMA_VERSION = 1

SETTINGS_SCHEMAS: dict[SettingsKind, type[BaseModel]] = {
    SettingsKind.GENERAL: GeneralSettings,
    SettingsKind.LED: LedSettings,
    SettingsKind.BUZZER: BuzzerSettings,
}

# ---------------------------------------------------------------------------
# BUILT-IN CATALOGUES
# ---------------------------------------------------------------------------
LED_PRESETS: dict[str, LedPreset] = {
    preset.id: preset for preset in (
        LedPreset(id="warm_white", name="Warm White", color=RGBColor(r=255, g=223, b=186), brightness=80),
        LedPreset(id="cool_white", name="Cool White", color=RGBColor(r=255, g=255, b=255), brightness=100),
        LedPreset(id="red", name="Red", color=RGBColor(r=255, g=0, b=0), brightness=70),
        LedPreset(id="green", name="Green", color=RGBColor(r=0, g=255, b=0), brightness=70),
        LedPreset(id="blue", name="Blue", color=RGBColor(r=0, g=0, b=255), brightness=70),
        LedPreset(id="purple", name="Purple", color=RGBColor(r=128, g=0, b=128), brightness=70),
        LedPreset(id="night_mode", name="Night Mode", color=RGBColor(r=255, g=165, b=0), brightness=20, animation="fade"),
    )
}

BUZZER_PATTERNS: dict[str, dict[str, Any]] = {
    "alarm": {"name": "Alarm", "description": "Urgent alarm sound",
              "frequency": 800, "duration": 500, "repeat": 3, "interval": 200},
    "notification": {"name": "Notification", "description": "General notification",
                     "frequency": 1000, "duration": 200, "repeat": 1, "interval": 0},
    "heartbeat": {"name": "Heartbeat", "description": "Heartbeat monitoring sound",
                  "frequency": 600, "duration": 100, "repeat": 2, "interval": 50},
    "button_press": {"name": "Button Press", "description": "UI interaction feedback",
                     "frequency": 1200, "duration": 50, "repeat": 1, "interval": 0},
    "success": {"name": "Success", "description": "Positive feedback",
                "frequency": 800, "duration": 100, "repeat": 2, "interval": 100},
    "error": {"name": "Error", "description": "Error indication",
              "frequency": 400, "duration": 300, "repeat": 1, "interval": 0},
    "warning": {"name": "Warning", "description": "Warning signal",
                "frequency": 600, "duration": 200, "repeat": 2, "interval": 150},
}

LED_ACTIONS = ("on", "off", "brightness", "color")


def deep_merge(base: dict, changes: dict) -> dict:
    """Recursively overlay `changes` on `base`; nested dicts merge, everything else replaces."""
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class DeviceSettingsService:

    # ---------------------------------------------------------------------------
    # STORAGE HELPERS
    # ---------------------------------------------------------------------------

    def get_device(self, db: Session, device_id: str) -> Robot:
        robot = db.query(Robot).filter(Robot.robot_id == device_id).first()
        if robot is None:
            raise NotFound("Device not found")
        return robot

    def _defaults(self, robot: Robot, kind: SettingsKind) -> BaseModel:
        if kind == SettingsKind.GENERAL:
            return GeneralSettings(device_name=robot.model)
        return SETTINGS_SCHEMAS[kind]()

    def _row(self, db: Session, robot: Robot, kind: SettingsKind) -> DeviceSettings:
        """Fetch the settings row, creating it from defaults if missing."""
        row = db.query(DeviceSettings).filter(
            DeviceSettings.device_id == robot.robot_id,
            DeviceSettings.kind == kind.value,
        ).first()
        if row is not None:
            return row

        row = DeviceSettings(
            device_id=robot.robot_id,
            kind=kind.value,
            schema_version=CURRENT_SCHEMA_VERSION,
            values=self._defaults(robot, kind).model_dump(mode="json"),
        )
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            # Another request created it first
            db.rollback()
            return db.query(DeviceSettings).filter(
                DeviceSettings.device_id == robot.robot_id,
                DeviceSettings.kind == kind.value,
            ).one()
        db.refresh(row)
        return row

    def load(self, db: Session, device_id: str, kind: SettingsKind) -> BaseModel:
        robot = self.get_device(db, device_id)
        row = self._row(db, robot, kind)
        settings = SETTINGS_SCHEMAS[kind].model_validate(row.values)
        if row.schema_version < CURRENT_SCHEMA_VERSION:
            self._store(db, row, settings)
        return settings

    def _store(self, db: Session, row: DeviceSettings, settings: BaseModel) -> None:
        row.values = settings.model_dump(mode="json")
        row.schema_version = CURRENT_SCHEMA_VERSION
        db.commit()

    def save(self, db: Session, device_id: str, kind: SettingsKind, changes: dict) -> BaseModel:
        """Merge `changes` into the stored document, validate, persist."""
        robot = self.get_device(db, device_id)
        row = self._row(db, robot, kind)
        merged = deep_merge(row.values, changes)
        settings = SETTINGS_SCHEMAS[kind].model_validate(merged)
        self._store(db, row, settings)
        return settings

    def _set_mode(self, db: Session, robot: Robot, mode: RobotMode) -> None:
        robot.current_mode = mode.value
        db.commit()

    # ---------------------------------------------------------------------------
    # GENERAL
    # ---------------------------------------------------------------------------

    def factory_reset(self, db: Session, device_id: str) -> Robot:
        """
        Drop every stored settings document and reset the robot's runtime
        status. Ownership and pairing password are left alone.
        """
        robot = self.get_device(db, device_id)
        db.query(DeviceSettings).filter(DeviceSettings.device_id == device_id).delete(
            synchronize_session=False
        )
        robot.status = RobotStatus.OFFLINE.value
        robot.current_mode = RobotMode.IDLE.value
        robot.wifi_connected = False
        robot.wifi_ssid = None
        robot.wifi_signal_strength = None
        robot.firmware_target = None
        db.commit()
        db.refresh(robot)
        logger.info(f"Factory reset of device {device_id}")
        return robot

    def device_info(self, db: Session, device_id: str) -> dict:
        robot = self.get_device(db, device_id)
        general = self.load(db, device_id, SettingsKind.GENERAL)
        return {
            "device_id": robot.robot_id,
            "device_name": general.device_name,
            "model": robot.model,
            "firmware_version": robot.firmware_version,
            "hardware_version": "1.0",
            "serial_number": f"{robot.model.replace('-', '')}-{robot.robot_id[-8:].upper()}",
            "registered_at": as_utc(robot.created_at),
            "last_seen": as_utc(robot.last_seen),
            "network_mode": robot.network_mode,
            "status": robot.status,
        }

    def request_firmware_update(
        self,
        db: Session,
        device_id: str,
        firmware_url: Optional[str],
        version: Optional[str],
    ) -> dict:
        if not firmware_url:
            raise ValidationError("Firmware URL is required")
        robot = self.get_device(db, device_id)
        robot.firmware_target = version or "latest"
        self._set_mode(db, robot, RobotMode.UPDATING)
        logger.info(f"Firmware update requested for device {device_id}: {version or 'latest'}")
        return {
            "firmware_url": firmware_url,
            "version": version or "latest",
            "status": "downloading",
        }

    def firmware_status(self, db: Session, device_id: str) -> dict:
        """
        Progress of the last firmware request, as far as the server knows it.

        The robot does not report download progress, so status is only
        "downloading" (requested, new version not yet reported) or "idle".
        """
        robot = self.get_device(db, device_id)
        updating = robot.current_mode == RobotMode.UPDATING.value
        return {
            "status": "downloading" if updating else "idle",
            "current_version": robot.firmware_version,
            "target_version": robot.firmware_target if updating else None,
            "last_seen": as_utc(robot.last_seen),
        }

    # ---------------------------------------------------------------------------
    # LED
    # ---------------------------------------------------------------------------

    def update_led(self, db: Session, device_id: str, changes: dict) -> LedSettings:
        # Manual changes detach the settings from whatever preset was applied
        settings = self.save(db, device_id, SettingsKind.LED, {**changes, "active_preset": None})
        self._set_mode(db, self.get_device(db, device_id), RobotMode.LAMP)
        return settings

    def control_led(
        self,
        db: Session,
        device_id: str,
        action: Optional[str],
        brightness: Optional[int] = None,
        color: Optional[RGBColor] = None,
    ) -> dict:
        if action not in LED_ACTIONS:
            raise ValidationError("Invalid action")
        robot = self.get_device(db, device_id)

        if action == "on":
            changes = {"enabled": True, "brightness": brightness if brightness is not None else 100}
            if color is not None:
                changes["color"] = color.model_dump()
            state = {"state": "on"}
        elif action == "off":
            changes = {"enabled": False}
            state = {"state": "off"}
        elif action == "brightness":
            changes = {"brightness": brightness if brightness is not None else 50}
            state = {}
        else:
            changes = {"color": (color or RGBColor()).model_dump()}
            state = {}

        settings = self.save(db, device_id, SettingsKind.LED, changes)
        self._set_mode(db, robot, RobotMode.IDLE if action == "off" else RobotMode.LAMP)

        result = {"action": action, **state}
        if action != "off":
            result["brightness"] = settings.brightness
            result["color"] = settings.color.model_dump()
        return result

    def set_animation(
        self,
        db: Session,
        device_id: str,
        animation: Optional[str],
        speed: float = 1.0,
    ) -> LedSettings:
        if animation not in VALID_ANIMATIONS:
            raise ValidationError("Invalid animation type")
        return self.save(db, device_id, SettingsKind.LED, {
            "animation": animation,
            "animation_speed": speed,
        })

    def presets(self) -> list[LedPreset]:
        return list(LED_PRESETS.values())

    def apply_preset(self, db: Session, device_id: str, preset_id: str) -> tuple[LedPreset, LedSettings]:
        preset = LED_PRESETS.get(preset_id)
        if preset is None:
            raise NotFound("Preset not found")
        settings = self.save(db, device_id, SettingsKind.LED, {
            "enabled": True,
            "color": preset.color.model_dump(),
            "brightness": preset.brightness,
            "animation": preset.animation or "none",
            "active_preset": preset.id,
        })
        self._set_mode(db, self.get_device(db, device_id), RobotMode.LAMP)
        return preset, settings

    # ---------------------------------------------------------------------------
    # BUZZER
    # ---------------------------------------------------------------------------

    def update_buzzer(self, db: Session, device_id: str, changes: dict) -> BuzzerSettings:
        return self.save(db, device_id, SettingsKind.BUZZER, changes)

    def list_patterns(self, db: Session, device_id: str) -> list[dict]:
        """Built-in patterns (with any per-device tuning) followed by custom ones."""
        settings: BuzzerSettings = self.load(db, device_id, SettingsKind.BUZZER)
        patterns = []
        for pattern_id, meta in BUZZER_PATTERNS.items():
            tuned = settings.patterns.get(pattern_id)
            entry = {"id": pattern_id, **meta, "custom": False}
            if tuned is not None:
                entry.update(tuned.model_dump())
            patterns.append(entry)
        for custom in settings.custom_patterns:
            patterns.append(custom.model_dump(mode="json"))
        return patterns

    def resolve_pattern(self, settings: BuzzerSettings, name: str) -> Optional[BuzzerPattern]:
        if name in settings.patterns:
            return settings.patterns[name]
        if name in BUZZER_PATTERNS:
            meta = BUZZER_PATTERNS[name]
            return BuzzerPattern(**{k: meta[k] for k in ("frequency", "duration", "repeat", "interval")})
        for custom in settings.custom_patterns:
            if custom.id == name or custom.name == name:
                return BuzzerPattern(**custom.model_dump(include={"frequency", "duration", "repeat", "interval"}))
        return None

    def play(
        self,
        db: Session,
        device_id: str,
        pattern: Optional[str] = None,
        custom_frequency: Optional[int] = None,
        custom_duration: Optional[int] = None,
        custom_repeat: Optional[int] = None,
    ) -> dict:
        robot = self.get_device(db, device_id)
        settings: BuzzerSettings = self.load(db, device_id, SettingsKind.BUZZER)

        if pattern:
            command = self.resolve_pattern(settings, pattern)
            if command is None:
                raise ValidationError("Invalid pattern")
        elif custom_frequency and custom_duration:
            command = BuzzerPattern(
                frequency=custom_frequency,
                duration=custom_duration,
                repeat=custom_repeat or 1,
                interval=0,
            )
        else:
            raise ValidationError("Either pattern or custom parameters required")

        self._set_mode(db, robot, RobotMode.ALARM)
        return {
            "pattern": pattern or "custom",
            "volume": settings.volume,
            **command.model_dump(),
        }

    def stop(self, db: Session, device_id: str) -> None:
        robot = self.get_device(db, device_id)
        if robot.current_mode == RobotMode.ALARM.value:
            self._set_mode(db, robot, RobotMode.IDLE)

    def test_tone(self, db: Session, device_id: str, frequency: int, duration: int) -> dict:
        """A single beep at the device's volume; does not change current_mode."""
        settings: BuzzerSettings = self.load(db, device_id, SettingsKind.BUZZER)
        return {
            "frequency": frequency,
            "duration": duration,
            "repeat": 1,
            "volume": settings.volume,
        }

    def create_pattern(self, db: Session, device_id: str, payload: CustomPatternCreate) -> CustomBuzzerPattern:
        settings: BuzzerSettings = self.load(db, device_id, SettingsKind.BUZZER)
        if payload.name in BUZZER_PATTERNS or any(p.name == payload.name for p in settings.custom_patterns):
            raise ValidationError(f"A pattern named '{payload.name}' already exists")

        custom = CustomBuzzerPattern(
            id=f"custom_{uuid.uuid4().hex[:8]}",
            created_at=utcnow(),
            **payload.model_dump(),
        )
        custom_patterns = [p.model_dump(mode="json") for p in settings.custom_patterns]
        custom_patterns.append(custom.model_dump(mode="json"))
        self.save(db, device_id, SettingsKind.BUZZER, {"custom_patterns": custom_patterns})
        return custom

    def set_volume(self, db: Session, device_id: str, volume: int) -> BuzzerSettings:
        if volume < 0 or volume > 100:
            raise ValidationError("Volume must be between 0 and 100")
        return self.save(db, device_id, SettingsKind.BUZZER, {"volume": volume})

    def buzzer_status(self, db: Session, device_id: str) -> dict:
        robot = self.get_device(db, device_id)
        settings: BuzzerSettings = self.load(db, device_id, SettingsKind.BUZZER)
        return {
            "is_playing": robot.current_mode == RobotMode.ALARM.value,
            "enabled": settings.enabled,
            "volume": settings.volume,
            "battery_level": robot.battery_level,
        }

    # ---------------------------------------------------------------------------
    # WIFI
    # ---------------------------------------------------------------------------

    def wifi_status(self, robot: Robot) -> dict:
        return {
            "connected": bool(robot.wifi_connected),
            "ssid": robot.wifi_ssid,
            "signal_strength": robot.wifi_signal_strength,
        }

    def configure_wifi(self, db: Session, device_id: str, ssid: str) -> Robot:
        """Record the network the device should join; it reports success via heartbeat."""
        robot = self.get_device(db, device_id)
        robot.wifi_ssid = ssid
        robot.wifi_connected = False
        robot.wifi_signal_strength = None
        robot.current_mode = RobotMode.WIFI_SETUP.value
        db.commit()
        db.refresh(robot)
        return robot

    def disconnect_wifi(self, db: Session, device_id: str) -> Robot:
        robot = self.get_device(db, device_id)
        robot.wifi_ssid = None
        robot.wifi_connected = False
        robot.wifi_signal_strength = None
        db.commit()
        db.refresh(robot)
        return robot


# Global instance
device_settings_service = DeviceSettingsService()
