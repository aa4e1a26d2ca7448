"""
Routes substituted when a user lacks access to the route they triggered.
"""

import logging

from ..messaging import add_reaction, post_message
from ..models import (
    WILDCARD_PERMISSION,
    ChannelMessageRoute,
    CommandRoute,
    MentionRoute,
)

logger = logging.getLogger(__name__)

PLUGIN_NAME = "permission_denied"
DENIED_REACTION = "astonished"
DENIED_COMMAND_TEXT = "Permission denied."


def _apologize(ctx, event):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, DENIED_REACTION, event.ts)
    post_message(
        ctx.client,
        event.channel,
        PLUGIN_NAME,
        f"I'm sorry, <@{event.user}>, but you're not allowed to do that.",
        thread_ts=event.thread_ts,
    )


def deny_mention(ctx, event, message):
    logger.warning(
        f"Mention permission denied for {event.user} in {event.channel}",
        extra={"user": event.user, "channel": event.channel},
    )
    _apologize(ctx, event)


def deny_channel_message(ctx, event, message):
    logger.warning(
        f"Channel message permission denied for {event.user} in {event.channel}",
        extra={"user": event.user, "channel": event.channel},
    )
    _apologize(ctx, event)


def deny_command(ctx, command, message):
    # The HTTP response already told the user; just leave a trace
    logger.warning(
        f"Slash command permission denied for {command.user_id}: {command.command}",
        extra={"user": command.user_id, "command": command.command},
    )


def get_mention_route() -> MentionRoute:
    return MentionRoute(
        name=PLUGIN_NAME,
        permissions=(WILDCARD_PERMISSION,),
        handler=deny_mention,
    )


def get_channel_message_route() -> ChannelMessageRoute:
    return ChannelMessageRoute(
        name=PLUGIN_NAME,
        permissions=(WILDCARD_PERMISSION,),
        handler=deny_channel_message,
    )


def get_command_route() -> CommandRoute:
    return CommandRoute(
        name=PLUGIN_NAME,
        permissions=(WILDCARD_PERMISSION,),
        immediate_response=DENIED_COMMAND_TEXT,
        handler=deny_command,
    )
