"""
Slack request signature verification.
"""

import logging
from typing import Mapping

from slack_sdk.signature import SignatureVerifier

from .errors import SignatureVerificationError

logger = logging.getLogger(__name__)


class SlackRequestVerifier:
    """
    Checks the ``X-Slack-Signature`` HMAC over ``v0:timestamp:body``.

    Requests older than five minutes are rejected as replays.
    """

    def __init__(self, signing_secret: str, clock=None):
        if clock is not None:
            self._verifier = SignatureVerifier(signing_secret, clock=clock)
        else:
            self._verifier = SignatureVerifier(signing_secret)

    def verify(self, headers: Mapping[str, str], body: bytes | str) -> None:
        """
        Raises:
            SignatureVerificationError: if the signature is missing or invalid
        """
        normalized = {key.lower(): value for key, value in headers.items()}
        timestamp = normalized.get("x-slack-request-timestamp")
        signature = normalized.get("x-slack-signature")

        if not timestamp or not signature:
            raise SignatureVerificationError("Missing Slack signature headers")

        if not timestamp.isdigit():
            raise SignatureVerificationError(f"Invalid request timestamp: {timestamp!r}")

        try:
            valid = self._verifier.is_valid(body=body, timestamp=timestamp, signature=signature)
        except UnicodeDecodeError as e:
            raise SignatureVerificationError(f"Request body is not UTF-8: {e}") from e

        if not valid:
            raise SignatureVerificationError("Slack signature mismatch or stale timestamp")
