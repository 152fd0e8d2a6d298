"""Server entry point: wires config, GPIO, state store and notifier to MCP."""

import asyncio
import logging
import sys
from pathlib import Path

from config import AppConfig, load_config
from devices import register_all_factories
from devices.manager import DeviceDeps, DeviceManager
from hardware import GpioZeroLines, configure_pin_factory
from mcp_server.server import create_server
from models import CharacteristicCache
from notifications import Notifier
from persistence import StateStore

# stdout carries the MCP protocol, so logs go to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


async def build_deps(config: AppConfig) -> DeviceDeps:
    """Open the state store and create the shared collaborators."""
    configure_pin_factory(config.gpio.pin_factory)

    store = StateStore(config.store.db_path)
    await store.initialize()

    notifier = None
    if config.notifier.api_url:
        notifier = Notifier(config.notifier.api_url, timeout=config.notifier.timeout)
        logger.info(f"Notifications go to {notifier.api_url}/notify")
    else:
        logger.info("notifier.api_url not set, notifications disabled")

    return DeviceDeps(
        lines=GpioZeroLines(asyncio.get_running_loop(), pull_up=config.gpio.pull_up),
        store=store,
        sink=CharacteristicCache(),
        notifier=notifier,
    )


async def main(config_dir: Path | None = None) -> None:
    try:
        config = load_config(config_dir)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)
    logger.info(f"Starting Intercom Door with {len(config.devices)} device(s)")

    device_manager = DeviceManager(config, await build_deps(config))
    register_all_factories(device_manager)
    await device_manager.initialize()

    server = create_server(device_manager)
    try:
        await server.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        await device_manager.shutdown()
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
