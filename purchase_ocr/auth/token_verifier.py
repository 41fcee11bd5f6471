"""Bearer token verification for the ``/api`` routes.

Tokens are HS256 (by default) JWTs carrying the caller identity in ``sub``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from purchase_ocr.utils.config import AuthConfig
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


class TokenVerificationError(Exception):
    """Raised when a bearer token is missing, malformed, or invalid."""


@dataclass
class Identity:
    """Authenticated caller decoded from a token."""

    uid: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


class TokenVerifier:
    """Verifies signed JWT bearer tokens.

    Args:
        config: Auth configuration with secret, algorithm and audience.
    """

    def __init__(self, config: AuthConfig) -> None:
        self.config = config

    def verify(self, token: str) -> Identity:
        """Decode and validate a token.

        Args:
            token: Encoded JWT, without the ``Bearer`` prefix.

        Returns:
            Identity taken from the token claims.

        Raises:
            TokenVerificationError: If the signature, expiry or audience
                check fails, or the token has no subject.
        """
        options = {"verify_aud": self.config.audience is not None}
        try:
            payload = jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[self.config.jwt_algorithm],
                audience=self.config.audience,
                options=options,
            )
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(str(exc)) from exc

        uid = payload.get("sub")
        if not uid:
            raise TokenVerificationError("token has no subject")
        return Identity(uid=uid, email=payload.get("email"), claims=payload)

    def issue(self, uid: str, email: str | None = None, ttl: timedelta = timedelta(hours=1)) -> str:
        """Create a signed token for a subject, used by tooling and tests."""
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {"sub": uid, "iat": now, "exp": now + ttl}
        if email:
            payload["email"] = email
        if self.config.audience:
            payload["aud"] = self.config.audience
        return jwt.encode(payload, self.config.jwt_secret, algorithm=self.config.jwt_algorithm)


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an ``Authorization`` header value.

    Raises:
        TokenVerificationError: If the header is absent or not a Bearer
            credential.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise TokenVerificationError("missing Authorization Bearer token")
    return authorization[len(BEARER_PREFIX):].strip()
