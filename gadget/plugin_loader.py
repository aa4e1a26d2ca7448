"""
Route plugins.

A plugin is a directory under ``plugins/`` holding a ``plugin.py`` module.
The module contributes routes through any of these factories:

    get_routes()                  routes of any category
    get_mention_routes()          MentionRoute only
    get_channel_message_routes()  ChannelMessageRoute only
    get_command_routes()          CommandRoute only

Every route a plugin returns is checked and its pattern compiled before any
of them reach the router, so one bad route drops the whole plugin instead of
leaving it half registered.
"""

import importlib.util
import logging
from collections import Counter
from pathlib import Path
from types import ModuleType
from typing import Optional

from .errors import RouteRegistrationError
from .models import Route, RouteCategory
from .router import Router, compile_route

logger = logging.getLogger(__name__)

BOT_ROOT = Path(__file__).parent.parent
PLUGINS_DIR = BOT_ROOT / "plugins"
PLUGIN_MODULE = "plugin.py"

# factory name -> category its routes must have (None accepts any)
ROUTE_FACTORIES: dict[str, Optional[RouteCategory]] = {
    "get_routes": None,
    "get_mention_routes": RouteCategory.MENTION,
    "get_channel_message_routes": RouteCategory.CHANNEL_MESSAGE,
    "get_command_routes": RouteCategory.COMMAND,
}


def routes_from_module(module: ModuleType) -> Optional[list[Route]]:
    """
    Collect routes from a plugin module's factories.

    Returns:
        The routes, or None if the module defines no route factory

    Raises:
        RouteRegistrationError: if a factory returns something that is not a
            route of its category, or a route has an invalid pattern
    """
    factories = [
        (attr, category)
        for attr, category in ROUTE_FACTORIES.items()
        if callable(getattr(module, attr, None))
    ]
    if not factories:
        return None

    routes = []
    for attr, category in factories:
        for route in getattr(module, attr)():
            if not isinstance(route, Route):
                raise RouteRegistrationError(f"{attr}() returned a non-route value: {route!r}")
            if category is not None and route.category != category:
                raise RouteRegistrationError(
                    f"{attr}() returned {type(route).__name__} '{route.name}'"
                )
            compile_route(route)
            routes.append(route)
    return routes


class PluginLoader:
    """Finds plugin directories and feeds their routes to a router."""

    def __init__(self, root_dir: Path | None = None, allowed_plugins: list[str] | None = None):
        self.root_dir = root_dir if root_dir is not None else PLUGINS_DIR
        self.allowed_plugins = allowed_plugins

    def discover_plugins(self) -> list[str]:
        """Names of plugin directories, sorted, filtered by the allow list."""
        if not self.root_dir.is_dir():
            logger.warning(f"Plugin directory not found: {self.root_dir}")
            return []

        names = sorted(
            item.name for item in self.root_dir.iterdir()
            if item.is_dir()
            and not item.name.startswith(('.', '_'))
            and (item / PLUGIN_MODULE).is_file()
        )
        if self.allowed_plugins is not None:
            skipped = [name for name in names if name not in self.allowed_plugins]
            if skipped:
                logger.info(f"Plugins not enabled in bot config: {skipped}")
            names = [name for name in names if name in self.allowed_plugins]
        return names

    def _import(self, name: str) -> ModuleType:
        spec = importlib.util.spec_from_file_location(
            f"gadget_plugins.{name}",
            self.root_dir / name / PLUGIN_MODULE,
        )
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def load_plugin(self, name: str) -> Optional[list[Route]]:
        """
        Import one plugin and collect its routes.

        Returns None, after logging why, if the plugin is missing, fails to
        import, defines no route factory or returns an invalid route.
        """
        if not (self.root_dir / name / PLUGIN_MODULE).is_file():
            logger.error(f"Plugin '{name}' has no {PLUGIN_MODULE} in {self.root_dir}")
            return None

        try:
            routes = routes_from_module(self._import(name))
        except RouteRegistrationError as e:
            logger.error(f"Plugin '{name}' rejected: {e}")
            return None
        except Exception as e:
            logger.exception(f"Failed to load plugin '{name}': {e}")
            return None

        if routes is None:
            logger.warning(f"Plugin '{name}' defines no route factory, skipping")
        return routes

    def load_all_plugins(self) -> dict[str, list[Route]]:
        """Routes of every plugin that loaded, keyed by plugin name."""
        plugins = {}
        for name in self.discover_plugins():
            routes = self.load_plugin(name)
            if routes is not None:
                plugins[name] = routes
        return plugins

    def register_plugins(self, router: Router) -> dict[str, list[Route]]:
        """Load every plugin and register its routes with ``router``."""
        plugins = self.load_all_plugins()
        for name, routes in plugins.items():
            router.register_many(routes)
            counts = Counter(route.category for route in routes)
            summary = ", ".join(
                f"{counts[category]} {category.value}"
                for category in RouteCategory
                if counts[category]
            )
            logger.info(f"Loaded plugin {name}: {summary or 'no routes'}")
        return plugins
