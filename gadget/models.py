"""
Data models for the Gadget bot.

Routes are created once at startup by plugins and never mutated afterwards.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

SUPER_ADMIN_GROUP = "globalAdmins"
WILDCARD_PERMISSION = "*"


class RouteCategory(Enum):
    """Trigger kind a route responds to."""
    MENTION = "mention"
    CHANNEL_MESSAGE = "channel_message"
    COMMAND = "slash_command"


@dataclass(frozen=True)
class User:
    """A Slack account known to the bot."""
    id: int
    uuid: str


@dataclass(frozen=True)
class Group:
    """A named permission bucket."""
    id: int
    name: str


# handler(ctx, event, message)
Handler = Callable[["HandlerContext", Any, str], None]


@dataclass(frozen=True)
class Route:
    """
    Descriptor shared by every route kind.

    An empty ``permissions`` tuple, or one containing ``*``, means the route
    is open to everyone. Higher ``priority`` is tried first.
    """
    name: str
    pattern: str = ""
    description: str = ""
    help: str = ""
    permissions: tuple[str, ...] = ()
    priority: int = 0
    handler: Optional[Handler] = field(default=None, compare=False, repr=False)

    category: ClassVar[RouteCategory]

    def __post_init__(self):
        # Accept lists from plugin code but store an immutable tuple
        if not isinstance(self.permissions, tuple):
            object.__setattr__(self, "permissions", tuple(self.permissions))

    @property
    def key(self) -> str:
        """Registry key for this route."""
        return self.name


@dataclass(frozen=True)
class MentionRoute(Route):
    """Handles ``app_mention`` events."""
    category: ClassVar[RouteCategory] = RouteCategory.MENTION


@dataclass(frozen=True)
class ChannelMessageRoute(Route):
    """Handles ``message`` events posted in channels the bot is in."""
    category: ClassVar[RouteCategory] = RouteCategory.CHANNEL_MESSAGE


@dataclass(frozen=True)
class CommandRoute(Route):
    """
    Handles a slash command invocation.

    ``command`` is the literal token Slack sends (e.g. ``/deploy``) and is
    the registry key. When ``immediate_response`` is set it is returned as
    the synchronous acknowledgement before the handler runs.
    """
    command: str = ""
    immediate_response: str = ""
    category: ClassVar[RouteCategory] = RouteCategory.COMMAND

    @property
    def key(self) -> str:
        return self.command


@dataclass(frozen=True)
class CompiledRoute:
    """A registered route together with its pre-compiled pattern."""
    route: Route
    matcher: Optional[re.Pattern] = None

    def match(self, text: str) -> Optional[re.Match]:
        if self.matcher is None:
            return None
        return self.matcher.search(text)


@dataclass(frozen=True)
class RouteMatch:
    """Result of selecting a route for a message."""
    route: Route
    match: Optional[re.Match] = None


@dataclass
class HandlerContext:
    """Everything a handler needs besides the event itself."""
    router: Any
    route: Route
    client: Any
    store: Any
    user: Optional[User] = None
    match: Optional[re.Match] = None
