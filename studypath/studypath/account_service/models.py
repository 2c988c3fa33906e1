from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON
from datetime import datetime
from sqlalchemy.orm import validates
from .db import Base
import uuid

ROLES = ("student", "admin")
SUBSCRIPTION_PLANS = ("free", "basic", "advanced", "professional")


def _utcnow() -> datetime:
    return datetime.utcnow()


def default_subscription() -> dict:
    return {
        "plan": "free",
        "start_date": None,
        "end_date": None,
        "payment_method": None,
        "auto_renew": False,
    }


def default_profile() -> dict:
    return {
        "avatar": None,
        "phone": None,
        "school": None,
        "target_schools": [],
        "subjects": [],
    }


def default_study_progress() -> dict:
    return {
        "total_questions": 0,
        "correct_questions": 0,
        "streak_days": 0,
        "last_study_date": None,
        "weak_points": [],
    }


def default_settings() -> dict:
    return {
        "notifications": {"email": True, "push": True},
        "language": "zh-CN",
    }


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(Enum(*ROLES, name="user_role"), default="student", nullable=False)

    # Study platform state, owned by other services but created with the account
    subscription = Column(JSON, default=default_subscription, nullable=False)
    profile = Column(JSON, default=default_profile, nullable=False)
    study_progress = Column(JSON, default=default_study_progress, nullable=False)
    settings = Column(JSON, default=default_settings, nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    @validates("subscription")
    def validate_subscription(self, key, value):
        plan = (value or {}).get("plan")
        if plan not in SUBSCRIPTION_PLANS:
            raise ValueError(f"Unknown subscription plan: {plan!r}")
        return value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
