"""Builders for signed Slack requests and a recording Slack client."""

import hashlib
import hmac
import json
import time
from types import SimpleNamespace

TEST_SECRET = "test-signing-secret"
BOT_UID = "U_BOT"


def sign_headers(body, secret=TEST_SECRET, timestamp=None, content_type="application/json"):
    """Headers Slack would send for ``body`` signed with ``secret``."""
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    ts = str(timestamp if timestamp is not None else int(time.time()))
    base = f"v0:{ts}:{body}".encode("utf-8")
    signature = "v0=" + hmac.new(secret.encode("utf-8"), base, hashlib.sha256).hexdigest()
    return {
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": signature,
        "Content-Type": content_type,
    }


def callback_body(event, authorizations=None):
    """A JSON event_callback envelope wrapping ``event``."""
    if authorizations is None:
        authorizations = [{"user_id": BOT_UID, "team_id": "T123"}]
    return json.dumps({
        "type": "event_callback",
        "token": "fake",
        "team_id": "T123",
        "api_app_id": "A123",
        "authorizations": authorizations,
        "event": event,
        "event_id": "Ev123",
        "event_time": 1234567890,
    })


def mention_event(text, user="U_USER", channel="C123", **extra):
    event = {
        "type": "app_mention",
        "user": user,
        "text": text,
        "channel": channel,
        "ts": "1234567890.123456",
    }
    event.update(extra)
    return event


def channel_message_event(text, user="U_USER", channel="C123", **extra):
    event = {
        "type": "message",
        "user": user,
        "text": text,
        "channel": channel,
        "channel_type": "channel",
        "ts": "1234567890.123456",
    }
    event.update(extra)
    return event


def command_body(command="/deploy", user_id="U_USER", text="", **extra):
    from urllib.parse import urlencode

    fields = {
        "command": command,
        "user_id": user_id,
        "text": text,
        "channel_id": "C123",
        "team_id": "T123",
        "response_url": "https://hooks.slack.com/commands/T123/1/abc",
        "trigger_id": "13345224609.738474920.8088930838d88f008e0",
    }
    fields.update(extra)
    return urlencode(fields)


class FakeSlackClient:
    """Records outbound Slack calls instead of making them."""

    def __init__(self, users=None):
        self.messages = []
        self.reactions = []
        self.users = users or {}

    def chat_postMessage(self, **kwargs):
        self.messages.append(kwargs)
        return SimpleNamespace(data={"ok": True, "ts": "1.0"})

    def reactions_add(self, **kwargs):
        self.reactions.append(kwargs)
        return SimpleNamespace(data={"ok": True})

    def users_info(self, user):
        return {"ok": True, "user": self.users[user]}

    @property
    def texts(self):
        return [message["text"] for message in self.messages]


def add_to_group(store, uuid, group_name):
    user = store.find_or_create_user(uuid)
    group = store.find_or_create_group(group_name)
    store.add_member(group, user)
    return user
