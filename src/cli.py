"""Command line entry point: ``intercom-door serve | config validate | config init``."""

import argparse
import asyncio
import sys
from pathlib import Path


def _config_dir_option(parser: argparse.ArgumentParser, default: str | None = None) -> None:
    hint = f" (default: {default})" if default else " (default: search ./config, ~/.config)"
    parser.add_argument("--config-dir", type=str, default=default, help="Config directory" + hint)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intercom-door",
        description="Serve GPIO door locks and intercoms to an MCP bridge",
    )
    commands = parser.add_subparsers(dest="command")

    _config_dir_option(commands.add_parser("serve", help="Run the MCP server on stdio"))

    config_parser = commands.add_parser("config", help="Inspect or create config.yaml")
    actions = config_parser.add_subparsers(dest="config_action")
    _config_dir_option(actions.add_parser("validate", help="Check config.yaml and pin usage"))
    _config_dir_option(actions.add_parser("init", help="Write an example config.yaml"), "./config")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        from main import main as serve

        asyncio.run(serve(Path(args.config_dir) if args.config_dir else None))
        return

    if args.command == "config" and args.config_action == "validate":
        from config_utils import validate_config

        sys.exit(0 if validate_config(args.config_dir) else 1)

    if args.command == "config" and args.config_action == "init":
        from config_utils import init_config

        init_config(args.config_dir)
        return

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
