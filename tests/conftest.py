"""Shared fixtures for Gadget tests."""

import pytest

from gadget.config import BotConfig
from gadget.dispatcher import Dispatcher
from gadget.router import Router
from gadget.server import create_app
from gadget.storage import UserStore
from gadget.tasks import TaskRunner

from slack_fixtures import TEST_SECRET, FakeSlackClient


@pytest.fixture
def store(tmp_path):
    return UserStore(tmp_path / "gadget.db")


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def fake_client():
    return FakeSlackClient()


@pytest.fixture
def runner():
    task_runner = TaskRunner(max_workers=4)
    yield task_runner
    task_runner.shutdown(wait=True)


@pytest.fixture
def config(tmp_path):
    return BotConfig(
        slack_oauth_token="xoxb-fake",
        signing_secret=TEST_SECRET,
        db_path=tmp_path / "gadget.db",
        global_admins=("U_ADMIN",),
    )


@pytest.fixture
def dispatcher(config, router, store, fake_client, runner):
    return Dispatcher(
        config,
        router=router,
        store=store,
        client=fake_client,
        runner=runner,
    )


@pytest.fixture
def app_client(dispatcher):
    app = create_app(dispatcher)
    app.config["TESTING"] = True
    return app.test_client()
