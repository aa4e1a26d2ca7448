"""Tests for the command-line entry point."""

import main
from gadget import __version__


def test_version(capsys):
    assert main.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == f"gadget {__version__}"


def test_no_command_prints_help(capsys):
    assert main.main([]) == 0
    assert "usage: gadget" in capsys.readouterr().out


def test_server_with_missing_config_fails(monkeypatch, tmp_path):
    monkeypatch.delenv("SLACK_OAUTH_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_SIGNING_SECRET", raising=False)

    assert main.main(["--env-file", str(tmp_path / "none.env"), "server"]) == 1


def test_server_runs_app(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_OAUTH_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "secret")
    monkeypatch.setenv("GADGET_DB_PATH", str(tmp_path / "gadget.db"))
    monkeypatch.setenv("GADGET_GLOBAL_ADMINS", "U_ADMIN")

    served = {}

    def fake_run(self, host, port):
        served["host"], served["port"] = host, port

    monkeypatch.setattr("flask.Flask.run", fake_run)

    assert main.main(["--env-file", str(tmp_path / "none.env"), "serve"]) == 0
    assert served == {"host": "0.0.0.0", "port": 3000}
