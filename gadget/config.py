"""
Configuration loading.

Secrets come from the environment (optionally a .env file); an optional JSON
bot config can restrict which plugins load.
"""

import os
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

BOT_DIR = Path(__file__).parent.parent

REQUIRED_VARS = ["SLACK_OAUTH_TOKEN", "SLACK_SIGNING_SECRET"]

DEFAULT_DB_PATH = "data/gadget.db"
DEFAULT_LISTEN_HOST = "0.0.0.0"
DEFAULT_LISTEN_PORT = 3000
DEFAULT_MAX_WORKERS = 16
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class BotConfig:
    """Settings read once at startup and passed to the dispatcher."""
    slack_oauth_token: str
    signing_secret: str
    db_path: Path = BOT_DIR / DEFAULT_DB_PATH
    listen_host: str = DEFAULT_LISTEN_HOST
    listen_port: int = DEFAULT_LISTEN_PORT
    global_admins: tuple[str, ...] = ()
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = DEFAULT_LOG_LEVEL
    plugins: Optional[tuple[str, ...]] = None


def global_admins_from_string(value: str) -> tuple[str, ...]:
    """Split a comma separated list of user ids, dropping blanks."""
    return tuple(uid.strip() for uid in value.split(",") if uid.strip())


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def load_bot_file(config_path: Path | str) -> dict:
    """Read a JSON bot config file."""
    path = Path(config_path)
    if not path.is_absolute():
        path = BOT_DIR / path
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read bot config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Bot config {path} must be a JSON object")

    logger.info(f"Loaded bot config: {data.get('name', path.name)}")
    return data


def config_from_env(
    env: Mapping[str, str],
    plugins: Optional[list[str]] = None,
) -> BotConfig:
    """
    Build a BotConfig from an environment mapping.

    Raises:
        ConfigError: if a required variable is missing or a number is invalid
    """
    missing = [var for var in REQUIRED_VARS if not env.get(var)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    db_path = Path(env.get("GADGET_DB_PATH") or DEFAULT_DB_PATH)
    if not db_path.is_absolute():
        db_path = BOT_DIR / db_path

    return BotConfig(
        slack_oauth_token=env["SLACK_OAUTH_TOKEN"],
        signing_secret=env["SLACK_SIGNING_SECRET"],
        db_path=db_path,
        listen_host=env.get("GADGET_LISTEN_HOST") or DEFAULT_LISTEN_HOST,
        listen_port=_int_setting(env, "GADGET_LISTEN_PORT", DEFAULT_LISTEN_PORT),
        global_admins=global_admins_from_string(env.get("GADGET_GLOBAL_ADMINS", "")),
        max_workers=_int_setting(env, "GADGET_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        log_level=(env.get("GADGET_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        plugins=tuple(plugins) if plugins is not None else None,
    )


def load_config(
    config_path: Path | str | None = None,
    env_file: Path | str | None = None,
) -> BotConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Optional JSON bot config (``plugins``, ``env_file``)
        env_file: .env file to load; defaults to the bot config's
            ``env_file`` or ``.env`` next to main.py
    """
    bot_file = load_bot_file(config_path) if config_path else {}

    env_name = env_file or bot_file.get("env_file") or ".env"
    env_path = Path(env_name)
    if not env_path.is_absolute():
        env_path = BOT_DIR / env_path
    load_dotenv(env_path)

    return config_from_env(os.environ, plugins=bot_file.get("plugins"))
