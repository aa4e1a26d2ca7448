"""
Decoding of Slack request bodies into typed events.

Events API bodies are JSON envelopes; slash commands arrive URL-encoded.
The inner events the bot routes are a small tagged union so the dispatcher
never has to dig the acting user out of an untyped payload.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import parse_qs

from .errors import MalformedEventError

logger = logging.getLogger(__name__)

URL_VERIFICATION = "url_verification"
EVENT_CALLBACK = "event_callback"


@dataclass(frozen=True)
class MentionEvent:
    """An ``app_mention`` event."""
    user: str
    channel: str
    text: str
    ts: str = ""
    thread_ts: str = ""


@dataclass(frozen=True)
class ChannelMessageEvent:
    """A ``message`` event."""
    user: str
    channel: str
    text: str
    ts: str = ""
    thread_ts: str = ""
    channel_type: str = ""
    subtype: str = ""
    bot_id: str = ""


@dataclass(frozen=True)
class CommandInvocation:
    """A slash command invocation."""
    command: str
    user_id: str
    text: str = ""
    channel_id: str = ""
    team_id: str = ""
    response_url: str = ""
    trigger_id: str = ""

    @property
    def user(self) -> str:
        return self.user_id


InnerEvent = Union[MentionEvent, ChannelMessageEvent]


@dataclass(frozen=True)
class UrlVerification:
    """Handshake Slack sends when the request URL is configured."""
    challenge: str


@dataclass(frozen=True)
class EventCallback:
    """
    An ``event_callback`` envelope.

    ``event`` is None when the inner event kind is not one the bot routes.
    ``payload`` keeps the decoded envelope for the bot identity resolver.
    """
    event: Optional[InnerEvent]
    event_type: str = ""
    payload: dict = field(default_factory=dict, compare=False, repr=False)


Envelope = Union[UrlVerification, EventCallback]


def _decode_json(body: bytes | str) -> dict:
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(f"Event body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedEventError("Event body is not a JSON object")
    return data


def _str_field(inner: dict, key: str) -> str:
    """Read a string field from an inner event; a missing or null value is empty."""
    value = inner.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedEventError(
            f"Event field '{key}' must be a string, got {type(value).__name__}"
        )
    return value


def _parse_inner_event(data: dict) -> tuple[Optional[InnerEvent], str]:
    inner = data.get("event")
    if not isinstance(inner, dict):
        raise MalformedEventError("event_callback without an event object")

    event_type = inner.get("type") or ""

    if event_type == "app_mention":
        return MentionEvent(
            user=_str_field(inner, "user"),
            channel=_str_field(inner, "channel"),
            text=_str_field(inner, "text"),
            ts=_str_field(inner, "ts"),
            thread_ts=_str_field(inner, "thread_ts"),
        ), event_type

    if event_type == "message":
        return ChannelMessageEvent(
            user=_str_field(inner, "user"),
            channel=_str_field(inner, "channel"),
            text=_str_field(inner, "text"),
            ts=_str_field(inner, "ts"),
            thread_ts=_str_field(inner, "thread_ts"),
            channel_type=_str_field(inner, "channel_type"),
            subtype=_str_field(inner, "subtype"),
            bot_id=_str_field(inner, "bot_id"),
        ), event_type

    logger.debug(f"Unsupported inner event type: {event_type!r}")
    return None, event_type


def parse_event(body: bytes | str) -> Envelope:
    """
    Decode an Events API request body.

    Raises:
        MalformedEventError: if the body is not JSON or not a known envelope
    """
    data = _decode_json(body)
    envelope_type = data.get("type")

    if envelope_type == URL_VERIFICATION:
        challenge = data.get("challenge")
        if not isinstance(challenge, str):
            raise MalformedEventError("url_verification without a challenge")
        return UrlVerification(challenge=challenge)

    if envelope_type == EVENT_CALLBACK:
        event, event_type = _parse_inner_event(data)
        return EventCallback(event=event, event_type=event_type, payload=data)

    raise MalformedEventError(f"Unknown envelope type: {envelope_type!r}")


def parse_command(body: bytes | str) -> CommandInvocation:
    """
    Decode a URL-encoded slash command body.

    Raises:
        MalformedEventError: if the command or user id is missing
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEventError(f"Command body is not UTF-8: {e}") from e

    fields = {key: values[0] for key, values in parse_qs(body).items()}

    command = fields.get("command", "")
    user_id = fields.get("user_id", "")
    if not command or not user_id:
        raise MalformedEventError("Slash command body missing command or user_id")

    return CommandInvocation(
        command=command,
        user_id=user_id,
        text=fields.get("text", ""),
        channel_id=fields.get("channel_id", ""),
        team_id=fields.get("team_id", ""),
        response_url=fields.get("response_url", ""),
        trigger_id=fields.get("trigger_id", ""),
    )
