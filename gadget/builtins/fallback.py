"""
Default mention route used when nothing else matches.
"""

from ..messaging import post_message
from ..models import WILDCARD_PERMISSION, MentionRoute

PLUGIN_NAME = "fallback"


def reply_unknown(ctx, event, message):
    post_message(
        ctx.client,
        event.channel,
        PLUGIN_NAME,
        f"Hi there! I see you sent me a message, <@{event.user}>, "
        "but I'm not sure what to do with that.",
        thread_ts=event.thread_ts,
    )


def get_mention_route() -> MentionRoute:
    """The default mention route."""
    return MentionRoute(
        name=PLUGIN_NAME,
        permissions=(WILDCARD_PERMISSION,),
        handler=reply_unknown,
    )
