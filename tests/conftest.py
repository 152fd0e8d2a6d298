"""Pytest configuration and fixtures for Intercom Door tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import DoorLockConfig, IntercomConfig
from hardware.gpio import EdgeHandler
from models.characteristics import CharacteristicCache
from persistence import StateStore
from utils.errors import HardwareIOError


class FakeLines:
    """In-memory LineIO that records writes and lets tests fire edges."""

    def __init__(self):
        self.levels: dict[int, int] = {}
        self.writes: list[tuple[int, int]] = []
        self.handlers: dict[int, EdgeHandler] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.closed = False

    def read_line(self, pin: int) -> int:
        if self.fail_reads:
            raise HardwareIOError(pin, "read", OSError("line busy"))
        return self.levels.get(pin, 0)

    def write_line(self, pin: int, value: int) -> None:
        if self.fail_writes:
            raise HardwareIOError(pin, "write", OSError("line busy"))
        self.writes.append((pin, value))
        self.levels[pin] = value

    def watch_line(self, pin: int, handler: EdgeHandler) -> None:
        self.handlers[pin] = handler

    def close(self) -> None:
        self.closed = True

    def edge(self, pin: int, level: int) -> None:
        """Change a line level and call its watcher like the GPIO layer would."""
        self.levels[pin] = level
        self.handlers[pin](None, level)


class RecordingNotifier:
    """Notifier stand-in that keeps every queued message."""

    def __init__(self):
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)

    async def close(self) -> None:
        pass


RELAY_PIN = 17
DOOR_PIN = 27

# reed_switch_active_low: the line reads 0 while the door is closed
DOOR_CLOSED = 0
DOOR_OPEN = 1


@pytest.fixture
def lines() -> FakeLines:
    """Create fake GPIO lines."""
    return FakeLines()


@pytest.fixture
def sink() -> CharacteristicCache:
    """Create a characteristic cache to capture published values."""
    return CharacteristicCache()


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Create a recording notifier."""
    return RecordingNotifier()


@pytest.fixture
async def store(tmp_path: Path) -> StateStore:
    """Create a test state store."""
    store = StateStore(tmp_path / "test_state.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def memory_config() -> DoorLockConfig:
    """Lock with memory and a reed switch (the default wiring)."""
    return DoorLockConfig(name="Front Door", relay_pin=RELAY_PIN, door_pin=DOOR_PIN)


@pytest.fixture
def memory_no_door_config() -> DoorLockConfig:
    """Lock with memory but no door sensor."""
    return DoorLockConfig(name="Side Door", relay_pin=RELAY_PIN)


@pytest.fixture
def plain_config() -> DoorLockConfig:
    """Lock without memory that relocks after a short window."""
    return DoorLockConfig(
        name="Gate",
        relay_pin=RELAY_PIN,
        lock_with_memory=False,
        unlocking_duration=0.1,
    )


@pytest.fixture
def intercom_config() -> IntercomConfig:
    """Intercom with the stock pins."""
    return IntercomConfig()
