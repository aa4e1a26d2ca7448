"""
Resolution of the bot's own Slack user id.

Slack does not tell the bot who it is up front, but every ``event_callback``
envelope lists the installation's authorizations. The first one carries the
bot user id, which the dispatcher uses to drop events the bot produced.
"""

import json
import logging
import threading
from typing import Optional

from .errors import BotIdentityError

logger = logging.getLogger(__name__)


def bot_uid_from_envelope(envelope: bytes | str | dict) -> str:
    """
    Extract ``authorizations[0].user_id`` from an event envelope.

    Raises:
        BotIdentityError: if the envelope is unparseable or lists no authorizations
    """
    if isinstance(envelope, dict):
        data = envelope
    else:
        try:
            data = json.loads(envelope)
        except (TypeError, ValueError) as e:
            raise BotIdentityError(f"Unparseable event body: {e}") from e

    authorizations = data.get("authorizations") if isinstance(data, dict) else None
    if not isinstance(authorizations, list) or not authorizations:
        raise BotIdentityError("No authorized users in event body")

    first = authorizations[0]
    user_id = first.get("user_id") if isinstance(first, dict) else None
    if not isinstance(user_id, str) or not user_id:
        raise BotIdentityError("No authorized users in event body")

    return user_id


class BotIdentity:
    """Single-assignment cell holding the bot's user id."""

    def __init__(self, value: Optional[str] = None):
        self._value = value or ""
        self._lock = threading.Lock()

    @property
    def value(self) -> str:
        return self._value

    def is_known(self) -> bool:
        return bool(self._value)

    def set_if_empty(self, value: str) -> str:
        """Store ``value`` unless an id is already known. Returns the stored id."""
        with self._lock:
            if not self._value and value:
                self._value = value
                logger.info(f"Resolved bot user id: {value}")
            return self._value

    def resolve(self, envelope: bytes | str | dict) -> str:
        """
        Return the bot id, extracting it from ``envelope`` the first time.

        Raises:
            BotIdentityError: if the id is unknown and the envelope lacks it
        """
        if self._value:
            return self._value
        return self.set_if_empty(bot_uid_from_envelope(envelope))
