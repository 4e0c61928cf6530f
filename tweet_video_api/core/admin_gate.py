"""Shared-secret gate for administrative operations."""

import hmac
import logging
from typing import Optional

from tweet_video_api.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)


class AdminGate:
    """
    A single configured secret gates every administrative operation.

    With no secret configured, every call is rejected.
    """

    def __init__(self, secret: Optional[str]):
        self._secret = secret or None

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def authorize(self, presented_secret: Optional[str]) -> None:
        """
        Raises:
            UnauthorizedError: When the presented secret is missing or differs from the configured one.
        """
        if not self._secret or not presented_secret:
            raise UnauthorizedError()
        if not hmac.compare_digest(presented_secret.encode(), self._secret.encode()):
            logger.warning("Rejected administrative call with an invalid secret")
            raise UnauthorizedError()


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
