"""
Magic 8-Ball - answers yes/no questions.

Runs at a low priority so more specific "can ..." or "will ..." routes win.
"""

import random

from gadget.messaging import add_reaction, post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute

PLUGIN_NAME = "eightball"

ANSWERS = [
    "It is certain",
    "It is decidedly so",
    "Without a doubt",
    "Yes - definitely",
    "You may rely on it",
    "As I see it, yes",
    "Most likely",
    "Outlook good",
    "Signs point to yes",
    "Yes",
    "Reply hazy, try again",
    "Ask again later",
    "Better not tell you now",
    "Cannot predict now",
    "Concentrate and ask again",
    "Don't count on it",
    "My reply is no",
    "My sources say no",
    "Outlook not so good",
    "Very doubtful",
]


def ask_eightball(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "8ball", event.ts)
    post_message(ctx.client, event.channel, PLUGIN_NAME, random.choice(ANSWERS))


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="eightball.askEightball",
            pattern=r"(?i)^(will|can|am I) .+[?]?$",
            description="Asks a magic 8-ball a question",
            help="Will|Can|Am I ... ?",
            permissions=(WILDCARD_PERMISSION,),
            priority=-10,
            handler=ask_eightball,
        ),
    ]
