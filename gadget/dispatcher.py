"""
Central event dispatcher for the Gadget bot.

Handles:
- Verifying and decoding Events API and slash command requests
- Routing mentions, channel messages and commands to the matching route
- Substituting default and permission-denied routes
- Handing the selected handler to the task runner

The HTTP response never waits on a handler; Slack expects an answer within
three seconds.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from slack_sdk import WebClient

from .builtins import fallback, permission_denied
from .config import BotConfig
from .errors import BotIdentityError, MalformedEventError, SignatureVerificationError
from .events import (
    ChannelMessageEvent,
    CommandInvocation,
    EventCallback,
    MentionEvent,
    UrlVerification,
    parse_command,
    parse_event,
)
from .identity import BotIdentity
from .models import SUPER_ADMIN_GROUP, HandlerContext, Route, RouteCategory, User
from .permissions import PermissionEvaluator
from .plugin_loader import PluginLoader
from .router import Router
from .storage import UserStore
from .tasks import TaskRunner
from .verifier import SlackRequestVerifier

logger = logging.getLogger(__name__)

UNKNOWN_COMMAND_TEXT = "Unknown command."


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a dispatch, translated to an HTTP response by the server."""
    status: int = 200
    body: str = ""
    content_type: Optional[str] = None
    access_denied: bool = False


def ephemeral_response(text: str, access_denied: bool = False) -> DispatchResult:
    body = json.dumps(
        {"response_type": "ephemeral", "text": text},
        separators=(",", ":"),
    )
    return DispatchResult(
        status=200,
        body=body,
        content_type="application/json",
        access_denied=access_denied,
    )


def strip_bot_mention(text: str, bot_uid: str) -> str:
    """Remove ``<@BOTID>`` tokens from a message and trim whitespace."""
    if bot_uid:
        text = text.replace(f"<@{bot_uid}>", "")
    return text.strip()


class Dispatcher:
    """Decides which route handles each inbound Slack request."""

    def __init__(
        self,
        config: BotConfig,
        router: Optional[Router] = None,
        store: Optional[UserStore] = None,
        client: Optional[WebClient] = None,
        verifier: Optional[SlackRequestVerifier] = None,
        runner: Optional[TaskRunner] = None,
        bot_identity: Optional[BotIdentity] = None,
        plugin_loader: Optional[PluginLoader] = None,
    ):
        self.config = config
        self.router = router if router is not None else Router()
        self.store = store if store is not None else UserStore(config.db_path)
        self.client = client if client is not None else WebClient(token=config.slack_oauth_token)
        self.verifier = verifier if verifier is not None else SlackRequestVerifier(config.signing_secret)
        self.runner = runner if runner is not None else TaskRunner(config.max_workers)
        self.bot_identity = bot_identity if bot_identity is not None else BotIdentity()
        self.permissions = PermissionEvaluator(self.store)
        self.plugin_loader = plugin_loader

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup(self) -> "Dispatcher":
        """Install built-in routes, load plugins and sync global admins."""
        self._install_builtin_routes()
        self._load_plugins()
        self.sync_global_admins()
        return self

    def _install_builtin_routes(self) -> None:
        if self.router.default_mention_route is None:
            self.router.default_mention_route = fallback.get_mention_route()
        if self.router.denied_mention_route is None:
            self.router.denied_mention_route = permission_denied.get_mention_route()
        if self.router.denied_channel_message_route is None:
            self.router.denied_channel_message_route = permission_denied.get_channel_message_route()
        if self.router.denied_command_route is None:
            self.router.denied_command_route = permission_denied.get_command_route()

    def _load_plugins(self) -> None:
        """Discover and register all plugin routes."""
        loader = self.plugin_loader or PluginLoader(
            allowed_plugins=list(self.config.plugins) if self.config.plugins is not None else None
        )
        plugins = loader.register_plugins(self.router)
        logger.info(f"Loaded {len(plugins)} plugins: {list(plugins.keys())}")

    def sync_global_admins(self) -> None:
        """Make the configured admins the exact members of the super-admin group."""
        logger.debug(f"Global admins: {', '.join(self.config.global_admins)}")
        self.store.sync_group(SUPER_ADMIN_GROUP, self.config.global_admins)

    # ------------------------------------------------------------------
    # Events API
    # ------------------------------------------------------------------

    def handle_event(self, headers: Mapping[str, str], body: bytes) -> DispatchResult:
        """Handle a request to the Events API endpoint."""
        try:
            self.verifier.verify(headers, body)
        except SignatureVerificationError as e:
            logger.warning(f"Rejected event request: {e}")
            return DispatchResult(status=401)

        try:
            envelope = parse_event(body)
        except MalformedEventError as e:
            logger.error(f"Could not parse event: {e}")
            return DispatchResult(status=500)

        if isinstance(envelope, UrlVerification):
            return DispatchResult(status=200, body=envelope.challenge, content_type="text/plain")

        return self._handle_callback(envelope)

    def _handle_callback(self, envelope: EventCallback) -> DispatchResult:
        try:
            bot_uid = self.bot_identity.resolve(envelope.payload)
        except BotIdentityError as e:
            logger.error(f"Could not resolve bot identity: {e}")
            return DispatchResult(status=500)

        event = envelope.event
        if event is None:
            logger.debug(f"Ignoring unsupported event type: {envelope.event_type}")
            return DispatchResult()

        # Ignore everything the bot produces to avoid infinite loops
        if not event.user or event.user == bot_uid:
            logger.debug(f"Ignoring event from {event.user or 'unknown user'}")
            return DispatchResult()

        user = self.store.find_or_create_user(event.user)
        message = strip_bot_mention(event.text, bot_uid)

        if isinstance(event, MentionEvent):
            return self._dispatch_mention(user, event, message)
        if isinstance(event, ChannelMessageEvent):
            return self._dispatch_channel_message(user, event, message)

        return DispatchResult()

    def _dispatch_mention(self, user: User, event: MentionEvent, message: str) -> DispatchResult:
        selected = self.router.select_route(RouteCategory.MENTION, message)
        if selected is not None:
            route, match = selected.route, selected.match
        else:
            route, match = self.router.default_mention_route, None

        if route is None:
            logger.warning(f"No mention route matched and no default route is set: {message!r}")
            return DispatchResult()

        access_denied = False
        if not self.permissions.can(user, route.permissions):
            self._log_denied(user, route, RouteCategory.MENTION)
            access_denied = True
            route, match = self.router.denied_mention_route, None

        if route is not None:
            logger.debug(
                f"Routing message: {message!r}",
                extra={"user": user.uuid, "route": route.name, "channel": event.channel},
            )
            self._run_route(route, user, match, event, message)

        return DispatchResult(access_denied=access_denied)

    def _dispatch_channel_message(
        self,
        user: User,
        event: ChannelMessageEvent,
        message: str,
    ) -> DispatchResult:
        selected = self.router.select_route(RouteCategory.CHANNEL_MESSAGE, message)
        if selected is None:
            return DispatchResult(status=404)

        route, match = selected.route, selected.match

        access_denied = False
        if not self.permissions.can(user, route.permissions):
            self._log_denied(user, route, RouteCategory.CHANNEL_MESSAGE)
            access_denied = True
            route, match = self.router.denied_channel_message_route, None

        if route is not None:
            logger.debug(
                f"Routing message: {message!r}",
                extra={"user": user.uuid, "route": route.name, "channel": event.channel},
            )
            self._run_route(route, user, match, event, message)

        return DispatchResult(access_denied=access_denied)

    # ------------------------------------------------------------------
    # Slash commands
    # ------------------------------------------------------------------

    def handle_command(self, headers: Mapping[str, str], body: bytes) -> DispatchResult:
        """Handle a request to the slash command endpoint."""
        try:
            self.verifier.verify(headers, body)
        except SignatureVerificationError as e:
            logger.warning(f"Rejected command request: {e}")
            return DispatchResult(status=401)

        try:
            command = parse_command(body)
        except MalformedEventError as e:
            logger.error(f"Could not parse slash command: {e}")
            return DispatchResult(status=400)

        route = self.router.find_command_route(command.command)
        if route is None:
            logger.info(f"Unknown command {command.command} from {command.user_id}")
            return ephemeral_response(UNKNOWN_COMMAND_TEXT)

        user = self.store.find_or_create_user(command.user_id)
        match = self._match_command(command)

        if not self.permissions.can(user, route.permissions):
            self._log_denied(user, route, RouteCategory.COMMAND)
            denied = self.router.denied_command_route
            if denied is None:
                return DispatchResult(access_denied=True)

            self._run_route(denied, user, None, command, command.text)
            if denied.immediate_response:
                return ephemeral_response(denied.immediate_response, access_denied=True)
            return DispatchResult(access_denied=True)

        logger.debug(
            f"Slash command {command.command}",
            extra={"user": user.uuid, "route": route.name, "command": command.command},
        )
        self._run_route(route, user, match, command, command.text)

        if route.immediate_response:
            return ephemeral_response(route.immediate_response)
        return DispatchResult()

    def _match_command(self, command: CommandInvocation):
        compiled = self.router.compiled(RouteCategory.COMMAND, command.command)
        return compiled.match(command.text) if compiled else None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _log_denied(self, user: User, route: Route, category: RouteCategory) -> None:
        logger.warning(
            f"Permission failure: user {user.uuid} -> {route.name}",
            extra={"user": user.uuid, "route": route.name, "category": category.value},
        )

    def _run_route(
        self,
        route: Route,
        user: User,
        match,
        event: Any,
        message: str,
    ) -> None:
        if route.handler is None:
            logger.warning(f"Route '{route.name}' has no handler")
            return

        ctx = HandlerContext(
            router=self.router,
            route=route,
            client=self.client,
            store=self.store,
            user=user,
            match=match,
        )
        self.runner.run_isolated(
            route.name,
            route.handler,
            ctx,
            event,
            message,
            context={"user": user.uuid, "route": route.name},
        )
