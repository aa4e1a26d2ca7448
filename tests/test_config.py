"""Tests for configuration loading."""

import json
import os

import pytest

from gadget.config import (
    BOT_DIR,
    config_from_env,
    global_admins_from_string,
    load_bot_file,
    load_config,
)
from gadget.errors import ConfigError

REQUIRED = {"SLACK_OAUTH_TOKEN": "xoxb-1", "SLACK_SIGNING_SECRET": "secret"}


def test_defaults():
    config = config_from_env(REQUIRED)

    assert config.slack_oauth_token == "xoxb-1"
    assert config.signing_secret == "secret"
    assert config.db_path == BOT_DIR / "data" / "gadget.db"
    assert config.listen_host == "0.0.0.0"
    assert config.listen_port == 3000
    assert config.global_admins == ()
    assert config.max_workers == 16
    assert config.log_level == "INFO"
    assert config.plugins is None


def test_overrides(tmp_path):
    env = dict(
        REQUIRED,
        GADGET_DB_PATH=str(tmp_path / "bot.db"),
        GADGET_LISTEN_HOST="127.0.0.1",
        GADGET_LISTEN_PORT="8080",
        GADGET_GLOBAL_ADMINS="U1, U2,,",
        GADGET_MAX_WORKERS="4",
        GADGET_LOG_LEVEL="debug",
    )
    config = config_from_env(env, plugins=["help"])

    assert config.db_path == tmp_path / "bot.db"
    assert config.listen_host == "127.0.0.1"
    assert config.listen_port == 8080
    assert config.global_admins == ("U1", "U2")
    assert config.max_workers == 4
    assert config.log_level == "DEBUG"
    assert config.plugins == ("help",)


@pytest.mark.parametrize("missing", ["SLACK_OAUTH_TOKEN", "SLACK_SIGNING_SECRET"])
def test_missing_required_variable(missing):
    env = {key: value for key, value in REQUIRED.items() if key != missing}
    with pytest.raises(ConfigError, match=missing):
        config_from_env(env)


def test_bad_port():
    with pytest.raises(ConfigError, match="GADGET_LISTEN_PORT"):
        config_from_env(dict(REQUIRED, GADGET_LISTEN_PORT="http"))


@pytest.mark.parametrize("value, expected", [
    ("", ()),
    ("U1", ("U1",)),
    (" U1 ,U2 ", ("U1", "U2")),
    (",,", ()),
])
def test_global_admins_from_string(value, expected):
    assert global_admins_from_string(value) == expected


def test_load_bot_file(tmp_path):
    path = tmp_path / "gadget.json"
    path.write_text(json.dumps({"name": "gadget", "plugins": ["dice"]}))

    assert load_bot_file(path)["plugins"] == ["dice"]


@pytest.mark.parametrize("content", ["[1, 2]", "{broken"])
def test_load_bot_file_rejects_bad_content(tmp_path, content):
    path = tmp_path / "gadget.json"
    path.write_text(content)

    with pytest.raises(ConfigError):
        load_bot_file(path)


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    for var in ["SLACK_OAUTH_TOKEN", "SLACK_SIGNING_SECRET", "GADGET_LISTEN_PORT"]:
        monkeypatch.delenv(var, raising=False)

    env_file = tmp_path / ".env"
    env_file.write_text(
        "SLACK_OAUTH_TOKEN=xoxb-from-file\n"
        "SLACK_SIGNING_SECRET=from-file\n"
        "GADGET_LISTEN_PORT=4000\n"
    )
    bot_file = tmp_path / "gadget.json"
    bot_file.write_text(json.dumps({"plugins": ["help", "dice"]}))

    try:
        config = load_config(config_path=bot_file, env_file=env_file)
    finally:
        for var in ["SLACK_OAUTH_TOKEN", "SLACK_SIGNING_SECRET", "GADGET_LISTEN_PORT"]:
            os.environ.pop(var, None)

    assert config.slack_oauth_token == "xoxb-from-file"
    assert config.listen_port == 4000
    assert config.plugins == ("help", "dice")
