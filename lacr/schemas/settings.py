"""
Device settings schemas - versioned value objects persisted per device.

Each *Settings model is the full document stored in device_settings.values;
the matching *Update model lists what a client may change, all optional.
"""

from datetime import datetime
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

Animation = Literal["none", "fade", "blink", "pulse", "rainbow", "color_cycle", "breathing", "strobe"]
VALID_ANIMATIONS = ("none", "fade", "blink", "pulse", "rainbow", "color_cycle", "breathing", "strobe")


def _check_time_zone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone '{value}'")
    return value


class RGBColor(BaseModel):
    r: int = Field(255, ge=0, le=255)
    g: int = Field(255, ge=0, le=255)
    b: int = Field(255, ge=0, le=255)


# ---------------------------------------------------------------------------
# GENERAL SETTINGS
# ---------------------------------------------------------------------------

class NotificationSettings(BaseModel):
    sound: bool = True
    vibration: bool = True
    led: bool = True


class PowerSettings(BaseModel):
    auto_sleep: bool = True
    sleep_timeout: int = Field(30, ge=1, le=240)  # minutes
    battery_warning: int = Field(20, ge=0, le=100)  # percent


class DisplaySettings(BaseModel):
    brightness: int = Field(80, ge=0, le=100)
    timeout: int = Field(60, ge=5, le=3600)  # seconds


class GeneralSettings(BaseModel):
    device_name: str = Field("GEM", min_length=1, max_length=50)
    user_name: str = Field("User", min_length=1, max_length=50)
    time_zone: str = "UTC"
    language: str = Field("en", min_length=2, max_length=10)
    theme: Literal["light", "dark", "auto"] = "light"
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    power: PowerSettings = Field(default_factory=PowerSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)

    @field_validator("time_zone")
    @classmethod
    def validate_time_zone(cls, value):
        return _check_time_zone(value)


class NotificationSettingsUpdate(BaseModel):
    sound: Optional[bool] = None
    vibration: Optional[bool] = None
    led: Optional[bool] = None


class PowerSettingsUpdate(BaseModel):
    auto_sleep: Optional[bool] = None
    sleep_timeout: Optional[int] = Field(None, ge=1, le=240)
    battery_warning: Optional[int] = Field(None, ge=0, le=100)


class DisplaySettingsUpdate(BaseModel):
    brightness: Optional[int] = Field(None, ge=0, le=100)
    timeout: Optional[int] = Field(None, ge=5, le=3600)


class GeneralSettingsUpdate(BaseModel):
    device_name: Optional[str] = Field(None, min_length=1, max_length=50)
    user_name: Optional[str] = Field(None, min_length=1, max_length=50)
    time_zone: Optional[str] = None
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    theme: Optional[Literal["light", "dark", "auto"]] = None
    notifications: Optional[NotificationSettingsUpdate] = None
    power: Optional[PowerSettingsUpdate] = None
    display: Optional[DisplaySettingsUpdate] = None

    @field_validator("time_zone")
    @classmethod
    def validate_time_zone(cls, value):
        return _check_time_zone(value)


class FirmwareUpdateRequest(BaseModel):
    firmware_url: Optional[str] = Field(None, max_length=1024)
    version: Optional[str] = Field(None, max_length=50)


# ---------------------------------------------------------------------------
# LED SETTINGS
# ---------------------------------------------------------------------------

class LedSettings(BaseModel):
    enabled: bool = True
    brightness: int = Field(50, ge=0, le=100)
    color: RGBColor = Field(default_factory=RGBColor)
    animation: Animation = "none"
    animation_speed: float = Field(1.0, gt=0, le=10)
    night_mode: bool = False
    auto_off: bool = True
    auto_off_delay: int = Field(30, ge=1, le=1440)  # minutes
    active_preset: Optional[str] = None


class LedSettingsUpdate(BaseModel):
    enabled: Optional[bool] = None
    brightness: Optional[int] = Field(None, ge=0, le=100)
    color: Optional[RGBColor] = None
    animation: Optional[Animation] = None
    night_mode: Optional[bool] = None
    auto_off: Optional[bool] = None
    auto_off_delay: Optional[int] = Field(None, ge=1, le=1440)


class LedControlRequest(BaseModel):
    """action: on, off, brightness or color."""
    action: Optional[str] = None
    brightness: Optional[int] = Field(None, ge=0, le=100)
    color: Optional[RGBColor] = None


class LedAnimationRequest(BaseModel):
    animation: Optional[str] = None
    speed: float = Field(1.0, gt=0, le=10)
    colors: Optional[list[RGBColor]] = None


class LedPreset(BaseModel):
    id: str
    name: str
    color: RGBColor
    brightness: int
    animation: Optional[Animation] = None


# ---------------------------------------------------------------------------
# BUZZER SETTINGS
# ---------------------------------------------------------------------------

class BuzzerPattern(BaseModel):
    frequency: int = Field(..., ge=20, le=20000)  # Hz
    duration: int = Field(..., ge=1, le=10000)  # ms per beep
    repeat: int = Field(1, ge=1, le=50)
    interval: int = Field(0, ge=0, le=10000)  # ms between beeps


class CustomBuzzerPattern(BuzzerPattern):
    id: str
    name: str
    description: str = ""
    custom: bool = True
    created_at: datetime


class BuzzerSettings(BaseModel):
    enabled: bool = True
    volume: int = Field(70, ge=0, le=100)
    # Per-device tuning of the built-in patterns the firmware plays on its own
    patterns: dict[str, BuzzerPattern] = Field(default_factory=lambda: {
        "alarm": BuzzerPattern(frequency=800, duration=500, repeat=3, interval=200),
        "notification": BuzzerPattern(frequency=1000, duration=200, repeat=1, interval=0),
        "heartbeat": BuzzerPattern(frequency=600, duration=100, repeat=2, interval=50),
        "button_press": BuzzerPattern(frequency=1200, duration=50, repeat=1, interval=0),
    })
    custom_patterns: list[CustomBuzzerPattern] = Field(default_factory=list)


class BuzzerSettingsUpdate(BaseModel):
    enabled: Optional[bool] = None
    volume: Optional[int] = Field(None, ge=0, le=100)
    patterns: Optional[dict[str, BuzzerPattern]] = None


class BuzzerPlayRequest(BaseModel):
    pattern: Optional[str] = None
    custom_frequency: Optional[int] = Field(None, ge=20, le=20000)
    custom_duration: Optional[int] = Field(None, ge=1, le=10000)
    custom_repeat: Optional[int] = Field(None, ge=1, le=50)


class BuzzerTestRequest(BaseModel):
    frequency: int = Field(800, ge=20, le=20000)
    duration: int = Field(200, ge=1, le=10000)


class CustomPatternCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field("", max_length=200)
    frequency: int = Field(..., ge=20, le=20000)
    duration: int = Field(..., ge=1, le=10000)
    repeat: int = Field(1, ge=1, le=50)
    interval: int = Field(0, ge=0, le=10000)


class VolumeRequest(BaseModel):
    volume: int = Field(..., ge=0, le=100)


# ---------------------------------------------------------------------------
# WIFI
# ---------------------------------------------------------------------------

class WifiConfigRequest(BaseModel):
    """The password is forwarded to nobody and stored nowhere; only the SSID is kept."""
    ssid: str = Field(..., min_length=1, max_length=64)
    password: Optional[str] = Field(None, max_length=128)
    security: Optional[str] = Field(None, max_length=20)


class WifiStatus(BaseModel):
    connected: bool
    ssid: Optional[str]
    signal_strength: Optional[int]


# ---------------------------------------------------------------------------
# RESPONSES
# ---------------------------------------------------------------------------

class GeneralSettingsResponse(BaseModel):
    success: bool = True
    settings: GeneralSettings


class LedSettingsResponse(BaseModel):
    success: bool = True
    settings: LedSettings


class LedPresetListResponse(BaseModel):
    success: bool = True
    presets: list[LedPreset]


class BuzzerSettingsResponse(BaseModel):
    success: bool = True
    settings: BuzzerSettings


class WifiStatusResponse(BaseModel):
    success: bool = True
    wifi: WifiStatus
