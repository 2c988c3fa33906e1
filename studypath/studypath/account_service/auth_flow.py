"""
Register, login and logout.

The user store is the source of truth. Tokens are self-verifying. The
session cache trails both: it is written only after the store and the token
issuer have succeeded, and it is never consulted before issuing a token.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .exceptions import InvalidCredentialsError, InvalidTokenError
from .models import User
from .passwords import verify_against_dummy, verify_password
from .schemas import PublicUser
from .session_cache import SessionCache
from .tokens import TOKEN_TTL, TokenIssuer
from .users import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: PublicUser


class AuthFlow:
    def __init__(self, users: UserStore, tokens: TokenIssuer, sessions: SessionCache):
        self.users = users
        self.tokens = tokens
        self.sessions = sessions

    def _start_session(self, user: User) -> AuthResult:
        claims = {
            "sub": user.id,
            "email": user.email,
            "role": user.role,
            "jti": uuid.uuid4().hex,
        }
        token = self.tokens.issue(claims, TOKEN_TTL)
        # Overwrites any earlier session for this account
        self.sessions.put(user.id, token, TOKEN_TTL)
        return AuthResult(token=token, user=self.users.to_public_view(user))

    def register(self, email: str, password: str, name: str) -> AuthResult:
        """
        Create an account and open its first session.

        Raises:
            DuplicateEmailError: the email is already registered
            HashingError: the password could not be hashed
        """
        user = self.users.create(email, password, name)
        return self._start_session(user)

    def login(self, email: str, password: str, now: Optional[datetime] = None) -> AuthResult:
        """
        Check credentials and open a fresh session.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = self.users.find_by_email(email)
        if user is None:
            verify_against_dummy(password)
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        self.users.record_login(user, now or datetime.utcnow())
        return self._start_session(user)

    def authenticate(self, token: str) -> dict:
        """Verify a bearer token and return its claims."""
        return self.tokens.verify(token)

    def logout(self, token: Optional[str]) -> Optional[str]:
        """
        Revoke the session for ``token``, if there is one to revoke.

        Always succeeds. Returns the account id whose entry was targeted, or
        None when the token could not be decoded.
        """
        if not token:
            return None
        try:
            user_id = self.tokens.verify(token)["sub"]
            self.sessions.delete(user_id)
        except InvalidTokenError as e:
            logger.debug("Logout with unverifiable token: %s", type(e).__name__)
            return None
        except Exception:
            # Logout never fails; unexpected errors are only logged
            logger.exception("Unexpected error during logout")
            return None
        return user_id
