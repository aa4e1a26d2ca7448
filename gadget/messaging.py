"""
Outbound Slack helpers for plugins.

Failures are logged with the channel and plugin name and then dropped;
nothing is retried.
"""

import logging
from typing import Any, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError

logger = logging.getLogger(__name__)


def thread_reply_kwargs(thread_ts: Optional[str]) -> dict[str, Any]:
    """Keyword arguments that reply in a thread when ``thread_ts`` is set."""
    if thread_ts:
        return {"thread_ts": thread_ts}
    return {}


def post_message(
    client: WebClient,
    channel: str,
    plugin: str,
    text: str,
    thread_ts: Optional[str] = None,
    **kwargs: Any,
) -> Optional[dict]:
    """
    Send a message to a channel.

    Returns:
        The API response data, or None if the call failed
    """
    try:
        response = client.chat_postMessage(
            channel=channel,
            text=text,
            **thread_reply_kwargs(thread_ts),
            **kwargs,
        )
        return response.data
    except SlackApiError as e:
        logger.error(
            f"Failed to post message to {channel}: {e.response.get('error')}",
            extra={"channel": channel, "plugin": plugin},
        )
    except SlackClientError as e:
        logger.error(
            f"Failed to post message to {channel}: {e}",
            extra={"channel": channel, "plugin": plugin},
        )
    return None


def add_reaction(
    client: WebClient,
    channel: str,
    plugin: str,
    reaction: str,
    timestamp: str,
) -> bool:
    """Add an emoji reaction to a message. Returns True on success."""
    try:
        client.reactions_add(channel=channel, name=reaction, timestamp=timestamp)
        return True
    except SlackApiError as e:
        logger.error(
            f"Failed to add reaction '{reaction}' in {channel}: {e.response.get('error')}",
            extra={"channel": channel, "plugin": plugin},
        )
    except SlackClientError as e:
        logger.error(
            f"Failed to add reaction '{reaction}' in {channel}: {e}",
            extra={"channel": channel, "plugin": plugin},
        )
    return False
