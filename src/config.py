"""Configuration loading for Intercom Door."""

from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "intercom-door" / "state.db"


class DoorLockConfig(BaseModel):
    """Electromagnetic lock with an optional reed-switch door sensor.

    Accepts both snake_case keys and the camelCase keys used by existing
    accessory configs.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["door_lock"] = "door_lock"
    name: str = Field(min_length=1)
    relay_pin: int = Field(
        ge=0, validation_alias=AliasChoices("relay_pin", "relayPin", "lockPin", "lock_pin")
    )
    door_pin: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("door_pin", "doorPin")
    )
    active_low: bool = Field(
        default=True, validation_alias=AliasChoices("active_low", "activeLow")
    )
    reed_switch_active_low: bool = Field(
        default=True,
        validation_alias=AliasChoices("reed_switch_active_low", "reedSwitchActiveLow"),
    )
    unlocking_duration: float = Field(
        default=2.0,
        gt=0,
        validation_alias=AliasChoices("unlocking_duration", "unlockingDuration"),
    )
    lock_with_memory: bool = Field(
        default=True, validation_alias=AliasChoices("lock_with_memory", "lockWithMemory")
    )

    @property
    def watches_door(self) -> bool:
        """Whether door edges drive reconciliation."""
        return self.lock_with_memory and self.door_pin is not None

    @property
    def unlock_level(self) -> int:
        """Relay line level that releases the lock."""
        return 0 if self.active_low else 1

    @property
    def secure_level(self) -> int:
        """Relay line level that engages the lock."""
        return 1 - self.unlock_level

    def door_open_from_level(self, level: int) -> bool:
        """Resolve a raw door line level.

        The reed switch is active while the magnet sits against it, which is
        when the door is closed.
        """
        closed_level = 0 if self.reed_switch_active_low else 1
        return level != closed_level


class IntercomConfig(BaseModel):
    """Intercom relay with a bell voltage sense line."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["intercom"] = "intercom"
    name: str = Field(default="Intercom Door", min_length=1)
    relay_pin: int = Field(
        default=7, ge=0, validation_alias=AliasChoices("relay_pin", "relayPin")
    )
    voltage_pin: int = Field(
        default=17, ge=0, validation_alias=AliasChoices("voltage_pin", "voltagePin")
    )


def _device_kind(value: Any) -> str:
    # Entries without a type are door locks
    if isinstance(value, dict):
        return value.get("type", "door_lock")
    return getattr(value, "type", "door_lock")


DeviceConfig = Annotated[
    Union[
        Annotated[DoorLockConfig, Tag("door_lock")],
        Annotated[IntercomConfig, Tag("intercom")],
    ],
    Discriminator(_device_kind),
]


class NotifierConfig(BaseModel):
    """Outbound notification endpoint."""

    model_config = ConfigDict(extra="forbid")

    api_url: str | None = Field(
        default=None, validation_alias=AliasChoices("api_url", "apiURL")
    )
    timeout: float = Field(default=10.0, gt=0)


class StoreConfig(BaseModel):
    """State store location."""

    model_config = ConfigDict(extra="forbid")

    db_path: Path = DEFAULT_DB_PATH

    @field_validator("db_path")
    @classmethod
    def _expand_home(cls, value: Path) -> Path:
        return value.expanduser()


class GpioConfig(BaseModel):
    """gpiozero settings."""

    model_config = ConfigDict(extra="forbid")

    pin_factory: str | None = None
    pull_up: bool = True


class AppConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(extra="forbid")

    devices: list[DeviceConfig] = Field(default_factory=list)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    gpio: GpioConfig = Field(default_factory=GpioConfig)

    @model_validator(mode="after")
    def _unique_names(self) -> "AppConfig":
        seen: set[str] = set()
        for device in self.devices:
            if device.name in seen:
                raise ValueError(f"Duplicate device name: {device.name}")
            seen.add(device.name)
        return self


def find_config_dir() -> Path:
    """Find the config directory.

    Looks for config directory in the following order:
    1. ./config (relative to cwd)
    2. ../config (parent of cwd)
    3. ~/.config/intercom-door
    """
    cwd = Path.cwd()

    if (cwd / "config").is_dir():
        return cwd / "config"

    if (cwd.parent / "config").is_dir():
        return cwd.parent / "config"

    home_config = Path.home() / ".config" / "intercom-door"
    if home_config.is_dir():
        return home_config

    return cwd / "config"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load the main configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    data = load_yaml(config_dir / "config.yaml")
    return AppConfig.model_validate(data)
