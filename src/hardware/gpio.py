"""GPIO line access for relays and sensors.

Lines are handled as raw levels (0 or 1). Active-low wiring is resolved by
the devices, never here. The gpiozero implementation creates a
``DigitalOutputDevice`` the first time a pin is written and a
``DigitalInputDevice`` the first time a pin is read or watched.

Usage notes:
- On a Raspberry Pi gpiozero picks lgpio/gpiod automatically; set
  ``gpio.pin_factory`` in config.yaml to force one (``mock`` for a dry run).
- Run as a user in the ``gpio`` group.
"""

import asyncio
import logging
import os
from typing import Callable, Protocol

from gpiozero import BadPinFactory, Device, DigitalInputDevice, DigitalOutputDevice, GPIOZeroError
from gpiozero.pins.mock import MockFactory

from utils.errors import HardwareIOError

logger = logging.getLogger(__name__)

EdgeHandler = Callable[[Exception | None, int | None], None]


class LineIO(Protocol):
    """Raw line access used by the lock devices."""

    def read_line(self, pin: int) -> int:
        ...

    def write_line(self, pin: int, value: int) -> None:
        ...

    def watch_line(self, pin: int, handler: EdgeHandler) -> None:
        """Call ``handler(err, value)`` on the event loop for every edge."""
        ...

    def close(self) -> None:
        ...


def configure_pin_factory(name: str | None) -> None:
    """Select a gpiozero pin factory by name, or leave gpiozero's default.

    Must run before the first line is claimed.
    """
    if name is None:
        return
    if name.lower() == "mock":
        Device.pin_factory = MockFactory()
    else:
        # gpiozero resolves names like "lgpio" or "rpigpio" when it first
        # needs a factory.
        os.environ["GPIOZERO_PIN_FACTORY"] = name
    logger.info(f"Using gpiozero pin factory: {name}")


class GpioZeroLines:
    """LineIO backed by gpiozero devices."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        pull_up: bool = True,
    ):
        self._loop = loop
        self.pull_up = pull_up
        self._outputs: dict[int, DigitalOutputDevice] = {}
        self._inputs: dict[int, DigitalInputDevice] = {}

    def _create(self, pin: int, factory: Callable[[], object]) -> object:
        try:
            return factory()
        except BadPinFactory as e:
            # No backend loaded. Dry runs must ask for gpio.pin_factory: mock.
            logger.error(f"No gpiozero pin factory available for line {pin}: {e}")
            raise HardwareIOError(pin, "claim", e) from e

    def _output(self, pin: int) -> DigitalOutputDevice:
        device = self._outputs.get(pin)
        if device is None:
            device = self._create(
                pin,
                lambda: DigitalOutputDevice(pin, active_high=True, initial_value=None),
            )
            self._outputs[pin] = device  # type: ignore[assignment]
            logger.debug(f"Claimed output line {pin}")
        return device  # type: ignore[return-value]

    def _input(self, pin: int) -> DigitalInputDevice:
        device = self._inputs.get(pin)
        if device is None:
            device = self._create(pin, lambda: DigitalInputDevice(pin, pull_up=self.pull_up))
            self._inputs[pin] = device  # type: ignore[assignment]
            logger.debug(f"Claimed input line {pin} (pull_up={self.pull_up})")
        return device  # type: ignore[return-value]

    def read_line(self, pin: int) -> int:
        """Read the raw level of a line."""
        try:
            if pin in self._outputs:
                return 1 if self._outputs[pin].pin.state else 0
            return 1 if self._input(pin).pin.state else 0
        except (GPIOZeroError, OSError) as e:
            raise HardwareIOError(pin, "read", e) from e

    def write_line(self, pin: int, value: int) -> None:
        """Drive an output line to a raw level."""
        if value not in (0, 1):
            raise ValueError(f"Line value must be 0 or 1, got {value!r}")
        try:
            self._output(pin).value = value
        except (GPIOZeroError, OSError) as e:
            raise HardwareIOError(pin, "write", e) from e
        logger.debug(f"Line {pin} <- {value}")

    def watch_line(self, pin: int, handler: EdgeHandler) -> None:
        """Watch both edges of an input line.

        gpiozero calls back on its own thread; the handler is re-dispatched on
        the event loop so all lock state changes stay on one thread.
        """
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        try:
            device = self._input(pin)
        except (GPIOZeroError, OSError) as e:
            raise HardwareIOError(pin, "watch", e) from e

        def on_edge() -> None:
            try:
                value = 1 if device.pin.state else 0
                error = None
            except (GPIOZeroError, OSError) as e:
                value, error = None, HardwareIOError(pin, "read", e)
            try:
                loop.call_soon_threadsafe(handler, error, value)
            except RuntimeError:
                # Loop already closed during shutdown
                pass

        device.when_activated = on_edge
        device.when_deactivated = on_edge
        logger.debug(f"Watching line {pin} on both edges")

    def close(self) -> None:
        """Release every claimed line."""
        for pin, device in [*self._outputs.items(), *self._inputs.items()]:
            try:
                device.close()
            except (GPIOZeroError, OSError) as e:
                logger.warning(f"Error releasing line {pin}: {e}")
        self._outputs.clear()
        self._inputs.clear()
