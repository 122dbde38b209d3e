"""
Registration authorization.

Services depend on the Authorizer protocol only, so the shared-secret
check can be replaced without touching registration logic.
"""

from __future__ import annotations

import hmac
from typing import Optional, Protocol

from .exceptions import Unauthorized


class Authorizer(Protocol):
    def authorize(self, token: Optional[str]) -> None:
        """Return normally if allowed, raise Unauthorized otherwise."""


class SharedSecretAuthorizer:
    """Accepts exactly one static, non-empty token.

    Surrounding whitespace is stripped from the submitted token only; it
    must then equal the configured secret exactly.
    """

    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")

    def authorize(self, token: Optional[str]) -> None:
        supplied = (token or "").strip().encode("utf-8")
        # An unconfigured secret disables registration entirely
        if not self._secret or not supplied:
            raise Unauthorized()
        if not hmac.compare_digest(supplied, self._secret):
            raise Unauthorized()
