"""
User record store.

Wraps a SQLAlchemy session with the operations the auth flow needs. Email
uniqueness is enforced by the unique index on ``users.email``; the lookup
before insert only avoids hashing a password for an email that is already
taken.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import DuplicateEmailError
from .models import User
from .passwords import hash_password
from .schemas import PublicUser

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def create(self, email: str, password: str, name: str) -> User:
        """
        Persist a new account with default role and platform state.

        Raises:
            DuplicateEmailError: the normalized email is already registered,
                including when a concurrent insert wins the race
            HashingError: the password could not be hashed
        """
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = User(email=email, password_hash=hash_password(password), name=name.strip())
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError(email) from e
        self.db.refresh(user)
        logger.info("Created account user_id=%s", user.id)
        return user

    def record_login(self, user: User, timestamp: Optional[datetime] = None) -> bool:
        """
        Update ``last_login``. Best-effort: a failure is logged and reported
        as False, never raised, so it cannot undo a successful login.
        """
        user_id = user.id
        user.last_login = timestamp or datetime.utcnow()
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Could not record login for user_id=%s: %s", user_id, e)
            return False
        return True

    @staticmethod
    def to_public_view(user: User) -> PublicUser:
        return PublicUser.model_validate(user)
