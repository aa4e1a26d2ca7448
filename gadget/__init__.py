"""
Gadget: a Slack Events API bot with regex routing and group permissions.

Contains the routing and dispatch engine plus the collaborators it needs
(storage, signature verification, event decoding, the HTTP surface).
"""

__version__ = "0.4.0"

from .models import (
    ChannelMessageRoute,
    CommandRoute,
    Group,
    HandlerContext,
    MentionRoute,
    Route,
    RouteCategory,
    User,
)
from .errors import (
    BotIdentityError,
    ConfigError,
    GadgetError,
    MalformedEventError,
    RouteRegistrationError,
    SignatureVerificationError,
)
from .config import BotConfig, load_config
from .router import Router
from .storage import UserStore
from .tasks import TaskRunner
from .dispatcher import Dispatcher, DispatchResult
from .server import create_app

__all__ = [
    '__version__',
    'ChannelMessageRoute',
    'CommandRoute',
    'Group',
    'HandlerContext',
    'MentionRoute',
    'Route',
    'RouteCategory',
    'User',
    'BotIdentityError',
    'ConfigError',
    'GadgetError',
    'MalformedEventError',
    'RouteRegistrationError',
    'SignatureVerificationError',
    'BotConfig',
    'load_config',
    'Router',
    'UserStore',
    'TaskRunner',
    'Dispatcher',
    'DispatchResult',
    'create_app',
]
