"""
Route registry and matcher.

Handles:
- Registering mention, channel message and slash command routes
- Compiling each route's pattern once, at registration time
- Selecting the highest priority route whose pattern matches a message
"""

import logging
import re
import threading
from typing import Iterable, Optional

from .errors import RouteRegistrationError
from .models import (
    ChannelMessageRoute,
    CommandRoute,
    CompiledRoute,
    MentionRoute,
    Route,
    RouteCategory,
    RouteMatch,
)

logger = logging.getLogger(__name__)


def compile_route(route: Route) -> CompiledRoute:
    """
    Compile a route's pattern.

    Raises:
        RouteRegistrationError: if the pattern is not a valid regular expression
    """
    if not route.pattern:
        return CompiledRoute(route=route)

    try:
        matcher = re.compile(route.pattern)
    except re.error as e:
        raise RouteRegistrationError(
            f"Invalid pattern for route '{route.name}': {route.pattern!r} ({e})"
        ) from e

    return CompiledRoute(route=route, matcher=matcher)


def _sort_key(compiled: CompiledRoute) -> tuple[int, str]:
    # Priority descending, then name ascending for equal priorities
    return (-compiled.route.priority, compiled.route.name)


class Router:
    """Registry of all routes, grouped by category."""

    def __init__(self):
        self._routes: dict[RouteCategory, dict[str, CompiledRoute]] = {
            category: {} for category in RouteCategory
        }
        self._sorted: dict[RouteCategory, list[CompiledRoute]] = {}
        self._lock = threading.Lock()

        self.default_mention_route: Optional[MentionRoute] = None
        self.denied_mention_route: Optional[MentionRoute] = None
        self.denied_channel_message_route: Optional[ChannelMessageRoute] = None
        self.denied_command_route: Optional[CommandRoute] = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, route: Route) -> None:
        """Upsert a route into its category, keyed by name or command token."""
        category = getattr(route, "category", None)
        if not isinstance(category, RouteCategory):
            raise RouteRegistrationError(
                f"Route '{route.name}' has no category; use MentionRoute, "
                "ChannelMessageRoute or CommandRoute"
            )

        key = route.key
        if not key:
            raise RouteRegistrationError(
                f"Route '{route.name}' has an empty {category.value} key"
            )

        compiled = compile_route(route)

        with self._lock:
            self._routes[category][key] = compiled
            self._sorted.pop(category, None)

        logger.debug(f"Registered {category.value} route: {key} -> {route.name}")

    def register_many(self, routes: Iterable[Route]) -> None:
        for route in routes:
            self.register(route)

    def add_mention_route(self, route: MentionRoute) -> None:
        self.register(route)

    def add_mention_routes(self, routes: Iterable[MentionRoute]) -> None:
        self.register_many(routes)

    def add_channel_message_route(self, route: ChannelMessageRoute) -> None:
        self.register(route)

    def add_channel_message_routes(self, routes: Iterable[ChannelMessageRoute]) -> None:
        self.register_many(routes)

    def add_command_route(self, route: CommandRoute) -> None:
        self.register(route)

    def add_command_routes(self, routes: Iterable[CommandRoute]) -> None:
        self.register_many(routes)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def routes(self, category: RouteCategory) -> dict[str, Route]:
        """Snapshot of a category's routes keyed by registry key."""
        with self._lock:
            return {
                key: compiled.route
                for key, compiled in self._routes[category].items()
            }

    def compiled(self, category: RouteCategory, key: str) -> Optional[CompiledRoute]:
        with self._lock:
            return self._routes[category].get(key)

    def find_route_by_name(self, category: RouteCategory, name: str) -> Optional[Route]:
        """Find a route by its name within a category."""
        with self._lock:
            for compiled in self._routes[category].values():
                if compiled.route.name == name:
                    return compiled.route
        return None

    def find_mention_route_by_name(self, name: str) -> Optional[MentionRoute]:
        return self.find_route_by_name(RouteCategory.MENTION, name)

    def find_channel_message_route_by_name(self, name: str) -> Optional[ChannelMessageRoute]:
        return self.find_route_by_name(RouteCategory.CHANNEL_MESSAGE, name)

    def find_command_route(self, command: str) -> Optional[CommandRoute]:
        """Find a slash command route by its literal command token."""
        compiled = self.compiled(RouteCategory.COMMAND, command)
        return compiled.route if compiled else None

    def _sorted_routes(self, category: RouteCategory) -> list[CompiledRoute]:
        with self._lock:
            cached = self._sorted.get(category)
            if cached is None:
                cached = sorted(self._routes[category].values(), key=_sort_key)
                self._sorted[category] = cached
            return cached

    def select_route(self, category: RouteCategory, text: str) -> Optional[RouteMatch]:
        """
        Select the route that should handle ``text``.

        Routes are tried by priority (highest first), ties broken by name.
        The first route whose pattern matches wins.

        Returns:
            RouteMatch with the route and regex match, or None
        """
        for compiled in self._sorted_routes(category):
            match = compiled.match(text)
            if match is not None:
                return RouteMatch(route=compiled.route, match=match)
        return None

    def find_mention_route_by_message(self, text: str) -> Optional[RouteMatch]:
        return self.select_route(RouteCategory.MENTION, text)

    def find_channel_message_route_by_message(self, text: str) -> Optional[RouteMatch]:
        return self.select_route(RouteCategory.CHANNEL_MESSAGE, text)

    def registered_routes(self) -> list[tuple[RouteCategory, Route]]:
        """
        All registered routes across categories, sorted by priority
        (descending) then name.

        Default and denied routes are not part of the registry maps and are
        therefore not included.
        """
        with self._lock:
            entries = [
                (category, compiled.route)
                for category, routes in self._routes.items()
                for compiled in routes.values()
            ]
        return sorted(entries, key=lambda entry: (-entry[1].priority, entry[1].name))
