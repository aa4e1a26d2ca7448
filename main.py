"""
Gadget - Main Entry Point

Gadget is a bot for Slack's Events API. It routes mentions, channel messages
and slash commands to plugins by regular expression, enforces permissions
based on groups managed through the bot, and keeps users and groups in a
SQLite database.
"""

import sys
import argparse
import logging

from gadget import __version__
from gadget.config import BotConfig, load_config
from gadget.dispatcher import Dispatcher
from gadget.errors import ConfigError
from gadget.server import create_app

EXECUTABLE = "gadget"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog=EXECUTABLE,
        description="Gadget is a bot for Slack's Events API",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/gadget.json)"
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to .env file (default: .env next to main.py)"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("server", aliases=["serve"], help="Run the bot")
    subparsers.add_parser("version", help="Print the version")
    return parser


def build_dispatcher(config: BotConfig) -> Dispatcher:
    """Create the dispatcher with built-in routes, plugins and admins in place."""
    dispatcher = Dispatcher(config).setup()
    logger.info(
        f"Registered {len(dispatcher.router.registered_routes())} routes"
    )
    return dispatcher


def run_server(config: BotConfig) -> None:
    """Start the bot."""
    logger.info("Starting Gadget...")

    dispatcher = build_dispatcher(config)
    app = create_app(dispatcher)

    logger.info(f"Server listening on {config.listen_host}:{config.listen_port}")
    try:
        app.run(host=config.listen_host, port=config.listen_port)
    finally:
        dispatcher.runner.shutdown(wait=True)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"{EXECUTABLE} {__version__}")
        return 0

    if args.command not in ("server", "serve"):
        parser.print_help()
        return 0

    configure_logging()
    try:
        config = load_config(config_path=args.config, env_file=args.env_file)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))
    run_server(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
