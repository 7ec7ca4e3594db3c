"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from lacr.models.user import User
from lacr.models.robot import Robot, RobotModel, NetworkMode, RobotStatus, RobotMode, ProvisioningState
from lacr.models.alarm import Alarm
from lacr.models.heartbeat import HeartbeatReading
from lacr.models.chat_message import ChatMessage
from lacr.models.device_settings import DeviceSettings, SettingsKind
from lacr.models.task import Task

__all__ = [
    "User",
    "Robot",
    "RobotModel",
    "NetworkMode",
    "RobotStatus",
    "RobotMode",
    "ProvisioningState",
    "Alarm",
    "HeartbeatReading",
    "ChatMessage",
    "DeviceSettings",
    "SettingsKind",
    "Task",
]
