"""
Bearer token issuance and verification.

Tokens are HS256 JWTs carrying the account id (``sub``), email and role, so
authorization decisions downstream need no store round-trip. Validity is
self-contained: the session cache is never consulted here.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from .exceptions import MalformedTokenError, TokenExpiredError, TokenSignatureError

# Fixed token lifetime; the session cache TTL matches it
TOKEN_TTL = timedelta(days=7)

REQUIRED_CLAIMS = ["exp", "iat", "sub"]


class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={self.algorithm!r})"

    def issue(self, claims: dict, ttl: timedelta = TOKEN_TTL, now: Optional[datetime] = None) -> str:
        """Sign ``claims`` with ``iat`` and ``exp = iat + ttl`` added."""
        issued_at = now or datetime.now(tz=timezone.utc)
        payload = dict(claims)
        payload["iat"] = issued_at
        payload["exp"] = issued_at + ttl
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """
        Decode and verify a token.

        Raises:
            TokenExpiredError: the token is past ``exp``
            TokenSignatureError: the signature does not match
            MalformedTokenError: anything else, including missing claims
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            raise TokenSignatureError("Token signature is invalid") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Token is malformed: {e}") from e


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
