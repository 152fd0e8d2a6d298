"""Data models for Intercom Door."""

from models.base import Device, DeviceStatus, DeviceType
from models.characteristics import Characteristic, CharacteristicCache, CharacteristicSink
from models.lock import TARGET_STATES, FlashRestore, Lock, LockRuntimeState, LockStateCode

__all__ = [
    "Characteristic",
    "CharacteristicCache",
    "CharacteristicSink",
    "Device",
    "DeviceStatus",
    "DeviceType",
    "FlashRestore",
    "Lock",
    "LockRuntimeState",
    "LockStateCode",
    "TARGET_STATES",
]
