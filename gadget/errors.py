"""
Exceptions raised by the Gadget core.

Only configuration, registration, authentication and decoding problems are
exceptions. Routing outcomes (no match, permission denied, unknown command)
are handled inside the dispatcher and never escape it.
"""


class GadgetError(Exception):
    """Base exception for Gadget errors."""
    pass


class ConfigError(GadgetError):
    """Required configuration is missing or invalid."""
    pass


class RouteRegistrationError(GadgetError):
    """A route could not be registered (bad pattern, missing key)."""
    pass


class SignatureVerificationError(GadgetError):
    """Request signature is missing, stale or does not match."""
    pass


class MalformedEventError(GadgetError):
    """Request body could not be decoded into a known event."""
    pass


class BotIdentityError(GadgetError):
    """The bot's own user id is not present in the event envelope."""
    pass
