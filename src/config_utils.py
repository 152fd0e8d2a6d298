"""Helpers behind ``intercom-door config``."""

from pathlib import Path

from config import AppConfig, DoorLockConfig, find_config_dir, load_config

EXAMPLE_CONFIG = """\
# Intercom Door configuration
# Pin numbers are BCM GPIO numbers.

devices:
  # Electromagnetic lock. With lock_with_memory the lock re-engages on its own
  # once the door closes, so the relay is only ever pulsed open.
  - type: door_lock
    name: Front Door
    relay_pin: 17
    door_pin: 27            # reed switch, omit if there is none
    active_low: true        # relay releases the lock when driven low
    reed_switch_active_low: true
    unlocking_duration: 2   # seconds before a non-memory lock relocks
    lock_with_memory: true

  # Intercom door opener with a bell voltage sense line.
  # - type: intercom
  #   name: Intercom Door
  #   relay_pin: 7
  #   voltage_pin: 17

notifier:
  # Messages are POSTed to {api_url}/notify. Leave unset to disable.
  api_url: "http://localhost:8080"
  timeout: 10

store:
  db_path: "~/.local/share/intercom-door/state.db"

gpio:
  # lgpio, rpigpio, pigpio or mock. Unset lets gpiozero choose.
  pin_factory: null
  pull_up: true
"""


def check_config(config: AppConfig) -> tuple[list[str], list[str]]:
    """Find wiring mistakes the schema cannot see.

    Returns:
        (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not config.devices:
        warnings.append("No devices defined")

    line_owner: dict[int, str] = {}
    for device in config.devices:
        lines = [device.relay_pin]
        if isinstance(device, DoorLockConfig) and device.door_pin is not None:
            lines.append(device.door_pin)
        elif not isinstance(device, DoorLockConfig):
            lines.append(device.voltage_pin)

        if len(set(lines)) < len(lines):
            errors.append(f"'{device.name}' uses line {lines[0]} for two things")
        for line in set(lines):
            owner = line_owner.setdefault(line, device.name)
            if owner != device.name:
                errors.append(f"Line {line} is used by both '{owner}' and '{device.name}'")

        if isinstance(device, DoorLockConfig):
            if device.door_pin is not None and not device.lock_with_memory:
                warnings.append(f"'{device.name}': door_pin is ignored without lock_with_memory")
            if device.lock_with_memory and device.door_pin is None:
                warnings.append(f"'{device.name}': no door sensor, state will read unknown")

    if not config.notifier.api_url:
        warnings.append("notifier.api_url not set, notifications are disabled")

    return errors, warnings


def validate_config(config_dir: str | None = None) -> bool:
    """Print a validation report for config.yaml. Returns True if it has no errors."""
    cfg_path = Path(config_dir) if config_dir else find_config_dir()
    config_file = cfg_path / "config.yaml"
    print(f"Validating {config_file}")

    if not config_file.exists():
        print("✗ config.yaml not found")
        return False

    try:
        config = load_config(cfg_path)
    except Exception as e:
        print(f"✗ Failed to parse config.yaml: {e}")
        return False

    print(f"✓ Schema OK, {len(config.devices)} device(s)")
    for device in config.devices:
        print(f"  - {device.name} ({device.type}, relay line {device.relay_pin})")

    errors, warnings = check_config(config)
    for warning in warnings:
        print(f"⚠ {warning}")
    for error in errors:
        print(f"✗ {error}")

    print("✓ Configuration is valid" if not errors else "✗ Configuration has errors")
    return not errors


def init_config(config_dir: str = "./config") -> None:
    """Write an example config.yaml unless one exists."""
    cfg_path = Path(config_dir)
    cfg_path.mkdir(parents=True, exist_ok=True)

    config_file = cfg_path / "config.yaml"
    if config_file.exists():
        print(f"⚠ {config_file} already exists, leaving it alone")
        return

    config_file.write_text(EXAMPLE_CONFIG)
    print(f"✓ Wrote {config_file}")
    print("Edit the pin numbers, then run 'intercom-door config validate'.")
