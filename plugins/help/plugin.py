"""
Help - list the routes the bot knows about.
"""

from gadget.messaging import post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute, RouteCategory

PLUGIN_NAME = "help"


def format_help(registered) -> str:
    """Render (category, route) pairs; routes without a description are skipped."""
    lines = ["*Here's what I can do:*\n"]

    for category, route in registered:
        if not route.description:
            continue
        if category == RouteCategory.COMMAND:
            trigger = route.command
        else:
            trigger = route.help or route.name
        lines.append(f"*-* `{trigger}` - {route.description}")

    if len(lines) == 1:
        return "I don't have any documented routes yet."
    return "\n".join(lines)


def show_help(ctx, event, message):
    post_message(
        ctx.client,
        event.channel,
        PLUGIN_NAME,
        format_help(ctx.router.registered_routes()),
        thread_ts=event.thread_ts,
    )


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="help.showHelp",
            pattern=r"(?i)^(help|what can you do)[?.!]?$",
            description="Lists everything I respond to",
            help="help",
            permissions=(WILDCARD_PERMISSION,),
            priority=10,
            handler=show_help,
        ),
    ]
