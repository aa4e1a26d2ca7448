"""
Network Utils - look things up on the network.

    hping [get|post|head] URL [COUNT] [INTERVAL(s|ms)]
    whois DOMAIN|IP|ASN
"""

import re
import time
import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import requests
import whois
from whois.exceptions import PywhoisError

from gadget.messaging import add_reaction, post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute

logger = logging.getLogger(__name__)

PLUGIN_NAME = "network_utils"
USER_AGENT = "Gadget (https://github.com/gadget-bot/gadget)"
REQUEST_TIMEOUT = 10
DEFAULT_METHOD = "GET"
DEFAULT_COUNT = 3
DEFAULT_INTERVAL = "2s"
MAX_COUNT = 10
ALLOWED_METHODS = {"GET", "POST", "HEAD"}

INTERVAL_PATTERN = re.compile(r"^([0-9]+)(s|ms)$")


@dataclass
class PingStats:
    """Outcome of a series of HTTP pings."""
    host: str
    method: str
    status_counts: dict[int, int] = field(default_factory=dict)
    failures: int = 0
    response_times_ms: list[float] = field(default_factory=list)

    @property
    def replies(self) -> int:
        return sum(self.status_counts.values())

    @property
    def transmitted(self) -> int:
        return self.replies + self.failures


def parse_interval(value: str) -> float:
    """Convert ``2s`` or ``500ms`` to seconds."""
    match = INTERVAL_PATTERN.match(value)
    if not match:
        raise ValueError(f"Failed to parse interval: {value}. Correct syntax is <number>s/ms")
    amount = int(match.group(1))
    return amount / 1000 if match.group(2) == "ms" else float(amount)


def http_ping(
    url: str,
    method: str = DEFAULT_METHOD,
    count: int = DEFAULT_COUNT,
    interval: float = 2.0,
    session: Optional[requests.Session] = None,
    sleep=time.sleep,
) -> PingStats:
    """Send ``count`` requests to ``url`` and collect status codes and timings."""
    method = method.upper()
    if method not in ALLOWED_METHODS:
        raise ValueError(f"Method '{method}' not recognized.")

    http = session or requests.Session()
    stats = PingStats(host=urlparse(url).netloc, method=method)

    for attempt in range(count):
        start = time.perf_counter()
        try:
            resp = http.request(
                method,
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=REQUEST_TIMEOUT,
                allow_redirects=False,
            )
            elapsed_ms = (time.perf_counter() - start) * 1e3
            stats.status_counts[resp.status_code] = stats.status_counts.get(resp.status_code, 0) + 1
            stats.response_times_ms.append(elapsed_ms)
        except requests.exceptions.RequestException as e:
            logger.debug(f"HTTP ping to {url} failed: {e}")
            stats.failures += 1

        if attempt < count - 1:
            sleep(interval)

    return stats


def format_stats(stats: PingStats) -> str:
    times = stats.response_times_ms
    fastest = min(times) if times else 0.0
    slowest = max(times) if times else 0.0
    average = sum(times) / len(times) if times else 0.0
    fail_pct = 100 * stats.failures / stats.transmitted if stats.transmitted else 0.0

    return (
        f"*{stats.host} HTTP ping statistics*\n"
        f"- {stats.transmitted} {stats.method} requests transmitted, "
        f"{stats.replies} replies received, {fail_pct:.0f}% requests failed\n"
        f"- HTTP Round-trip min/avg/max = {fastest:.2f}/{average:.2f}/{slowest:.2f} ms\n"
    )


def run_http_ping(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "male-detective", event.ts)

    method = ctx.match.group(2) or DEFAULT_METHOD
    url = ctx.match.group(3)
    count = min(int(ctx.match.group(5) or DEFAULT_COUNT), MAX_COUNT)
    interval = ctx.match.group(7) or DEFAULT_INTERVAL

    try:
        stats = http_ping(url, method=method, count=count, interval=parse_interval(interval))
        response = format_stats(stats)
    except ValueError as e:
        response = str(e)

    post_message(ctx.client, event.channel, PLUGIN_NAME, response)


def whois_target(raw: str) -> str:
    """Slack turns domains into <http://example.com|example.com> links; keep the label."""
    names = raw.split("|")
    return names[1] if len(names) > 1 else names[0]


def lookup_whois(query: str, lookup=None) -> str:
    """Raw WHOIS text for a domain, IP or ASN."""
    entry = (lookup or whois.whois)(query)
    return entry.text


def query_whois(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "male-detective", event.ts)

    query = whois_target(ctx.match.group(1))
    try:
        result = lookup_whois(query)
    except (PywhoisError, OSError) as e:
        logger.warning(f"WHOIS lookup for {query} failed: {e}", extra={"plugin": PLUGIN_NAME})
        result = f"Something went wrong looking up WHOIS info for '{query}': {e}"

    post_message(ctx.client, event.channel, PLUGIN_NAME, f"```{result}```\n")


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="network_utils.runHTTPPing",
            pattern=r"(?i)^hping( (get|post|head))? <?(https?://[^\s>|]+)[^\s>]*>?( ([0-9]+)( ([0-9]+(s|ms)))?)?$",
            description="Sends HTTP Pings to a given URL",
            help="hping [get|post|head] URL [COUNT] [INTERVAL(s|ms)]",
            permissions=(WILDCARD_PERMISSION,),
            handler=run_http_ping,
        ),
        MentionRoute(
            name="network_utils.queryWhois",
            pattern=r"(?i)^whois <?([^>]+)>?$",
            description="Looks up WHOIS info for a given domain, IP, or ASN",
            help="whois <DOMAIN|IP|ASN>",
            permissions=(WILDCARD_PERMISSION,),
            handler=query_whois,
        ),
    ]
