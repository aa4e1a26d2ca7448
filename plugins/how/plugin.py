"""
How - step-by-step instructions for anything, courtesy of wikiHow.

    how do I <thing>?
"""

import random
import logging
from typing import Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from gadget.messaging import add_reaction, post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute

logger = logging.getLogger(__name__)

PLUGIN_NAME = "how"
WIKIHOW_URL = "https://www.wikihow.com"
REQUEST_TIMEOUT = 10
MAX_ATTEMPTS = 3

API_ERROR_TEXT = "Sorry, I couldn't query the wikiHow API."
PAGE_ERROR_TEXT = "Sorry, but I couldn't fetch the wikiHow page."
UNKNOWN_TEXT = "Sorry, but I don't know how to do that."


def search_titles(query: str, session: requests.Session) -> list[str]:
    """Titles of wikiHow articles matching ``query``."""
    resp = session.get(
        f"{WIKIHOW_URL}/api.php",
        params={"action": "query", "list": "search", "srsearch": query, "format": "json"},
        timeout=REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    results = (resp.json().get("query") or {}).get("search") or []
    return [result["title"] for result in results if result.get("title")]


def extract_steps(html: str) -> list[str]:
    """The bold step headlines of a wikiHow article."""
    soup = BeautifulSoup(html, "html.parser")
    return [step.get_text(strip=True) for step in soup.select("b.whb")]


def format_instructions(title: str, steps: list[str]) -> str:
    lines = [f"*{title}*"]
    lines += [f"_{i}._ {step}" for i, step in enumerate(steps, start=1)]
    lines.append(f"_{len(steps) + 1}._ Profit!")
    return "\n".join(lines) + "\n"


def get_instructions(
    query: str,
    session: Optional[requests.Session] = None,
    rng=random,
) -> str:
    """
    Pick a matching article and summarize its first three to five steps,
    followed by the traditional final step.
    """
    http = session or requests.Session()

    try:
        titles = search_titles(query, http)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"wikiHow search for {query!r} failed: {e}", extra={"plugin": PLUGIN_NAME})
        return API_ERROR_TEXT

    if not titles:
        return UNKNOWN_TEXT

    for _ in range(MAX_ATTEMPTS):
        title = rng.choice(titles)
        try:
            resp = http.get(f"{WIKIHOW_URL}/{quote(title, safe='')}", timeout=REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.warning(f"wikiHow page {title!r} failed: {e}", extra={"plugin": PLUGIN_NAME})
            return PAGE_ERROR_TEXT

        if resp.status_code != 200:
            continue

        steps = extract_steps(resp.text)
        if not steps:
            continue

        how_many = min(len(steps), 3 + rng.randrange(min(3, len(steps))))
        chosen = steps[:how_many]
        # an empty headline means the page layout changed; try another article
        if not all(chosen):
            continue

        return format_instructions(title, chosen)

    return UNKNOWN_TEXT


def how_do_i(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "eyes", event.ts)
    post_message(ctx.client, event.channel, PLUGIN_NAME, get_instructions(ctx.match.group(1)))


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="how.howDoI",
            pattern=r"(?i)^How Do I ([^?]+)\??",
            description="Explains how to do things, according to wikiHow",
            help="how do I ...?",
            permissions=(WILDCARD_PERMISSION,),
            handler=how_do_i,
        ),
    ]
