"""Hardware line access for Intercom Door."""

from hardware.gpio import EdgeHandler, GpioZeroLines, LineIO, configure_pin_factory

__all__ = ["EdgeHandler", "GpioZeroLines", "LineIO", "configure_pin_factory"]
