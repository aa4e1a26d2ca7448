"""
User Info - show a user's Slack profile.
"""

import random
import logging
from typing import Optional

from slack_sdk.errors import SlackApiError

from gadget.messaging import post_message
from gadget.models import MentionRoute

logger = logging.getLogger(__name__)

PLUGIN_NAME = "user_info"

SPIRIT_ANIMALS = [
    "Giant Panda",
    "Blue Whale",
    "Bengal Tiger",
    "Asian Elephant",
    "Gorilla",
    "Snow Leopard",
    "Orangutan",
    "Sea Turtle",
    "Black Rhino",
    "African Penguin",
    "Red Panda",
    "Polar Bear",
]


def fetch_user_info(client, uuid: str) -> Optional[dict]:
    """Look up a Slack user profile, returning None on API errors."""
    try:
        response = client.users_info(user=uuid)
    except SlackApiError as e:
        logger.warning(
            f"Failed to get user info for {uuid}: {e.response.get('error')}",
            extra={"uuid": uuid},
        )
        return None
    return response.get("user")


def format_user_info(info: dict, spirit_animal: str) -> str:
    profile = info.get("profile") or {}
    return (
        f"- *Real Name:* {info.get('real_name', '')}\n"
        f"- *Time Zone:* {info.get('tz', '')}\n"
        f"- *Email:* {profile.get('email', '')}\n"
        f"- *Locale:* {info.get('locale', '')}\n"
        f"- *Spirit Animal:* {spirit_animal}\n"
    )


def describe_user(ctx, event, message):
    uuid = ctx.match.group(2)
    ctx.store.find_or_create_user(uuid)

    info = fetch_user_info(ctx.client, uuid)
    if info is None:
        response = f"Sorry, I couldn't look up <@{uuid}>."
    else:
        response = format_user_info(info, random.choice(SPIRIT_ANIMALS))

    post_message(ctx.client, event.channel, PLUGIN_NAME, response)


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="user_info.describeUser",
            pattern=r"(?i)^(tell me about|who is) <@([a-z0-9]+)>[.?]?$",
            description="Shows a user's Slack profile",
            help="who is @user",
            permissions=("admins",),
            handler=describe_user,
        ),
    ]
