"""
Dice - roll two six-sided dice.
"""

import random

from gadget.messaging import add_reaction, post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute

PLUGIN_NAME = "dice"


def roll_d6(rng=random) -> tuple[int, int]:
    return rng.randint(1, 6), rng.randint(1, 6)


def roll_dice(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "game_die", event.ts)

    roll1, roll2 = roll_d6()
    post_message(
        ctx.client,
        event.channel,
        PLUGIN_NAME,
        f"<@{event.user}> rolled a {roll1} and a {roll2}",
    )


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="dice.rollD6",
            pattern=r"(?i)^(roll some dice|dice me)[!.]?$",
            description="Rolls two d6 dice",
            help="roll some dice",
            permissions=(WILDCARD_PERMISSION,),
            handler=roll_dice,
        ),
    ]
