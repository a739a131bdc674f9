"""Bearer-token gate in front of every protected endpoint."""

from __future__ import annotations

import hmac
import logging
from enum import Enum
from typing import Optional

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "

_MISSING_MESSAGE = (
    "You didn't provide an API key. You need to provide your API key in an "
    "Authorization header using Bearer auth (i.e. Authorization: Bearer YOUR_KEY), "
    "or as the password field (with blank username) if you're accessing the API "
    "from your browser and are prompted for a username and password. You can "
    "obtain an API key from https://platform.openai.com/account/api-keys."
)
_MALFORMED_MESSAGE = (
    "You must provide the API key using Bearer authentication "
    "(i.e. Authorization: Bearer YOUR_KEY)."
)
_WRONG_KEY_MESSAGE = (
    "Incorrect API key provided: ***. You can find your API key at "
    "https://platform.openai.com/account/api-keys."
)


class AuthResult(str, Enum):
    AUTHENTICATED = "authenticated"
    MISSING_HEADER = "missing_header"
    MALFORMED_SCHEME = "malformed_scheme"
    WRONG_KEY = "wrong_key"


class AuthGate:
    """Classifies an ``Authorization`` header value against the configured key.

    Only ``Bearer <key>`` with the exact, case-sensitive scheme token and a
    single space separator is accepted. The key comparison is constant-time.
    """

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key.encode("utf-8")

    def check(self, authorization: Optional[str]) -> AuthResult:
        if authorization is None:
            return AuthResult.MISSING_HEADER
        if not authorization.startswith(_BEARER_PREFIX):
            return AuthResult.MALFORMED_SCHEME
        token = authorization[len(_BEARER_PREFIX):].encode("utf-8")
        if not hmac.compare_digest(token, self._api_key):
            return AuthResult.WRONG_KEY
        return AuthResult.AUTHENTICATED

    def require(self, authorization: Optional[str]) -> None:
        """Raise :class:`AuthenticationError` unless the header authenticates."""

        result = self.check(authorization)
        if result is AuthResult.AUTHENTICATED:
            return
        logger.info("Rejected request: %s", result.value)
        raise authentication_error(result)


def authentication_error(result: AuthResult) -> AuthenticationError:
    if result is AuthResult.MISSING_HEADER:
        return AuthenticationError(_MISSING_MESSAGE)
    if result is AuthResult.MALFORMED_SCHEME:
        return AuthenticationError(_MALFORMED_MESSAGE)
    if result is AuthResult.WRONG_KEY:
        return AuthenticationError(_WRONG_KEY_MESSAGE, code="invalid_api_key")
    raise ValueError(f"{result!r} is not a rejection")
