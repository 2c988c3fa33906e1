"""
Event logger utility for authentication events.
"""
from datetime import datetime
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import settings

logger = logging.getLogger("studypath.auth_events")


ALLOWED_EVENT_TYPES = {
    "register_success",
    "register_conflict",
    "login_success",
    "login_failure",
    "logout",
}

# Never written to the log, whatever the caller passes
SECRET_FIELDS = {"password", "password_hash", "token", "secret"}


def configure_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> None:
    """Configure stdout logging and, when the log directory is writable, a file log."""
    log_dir = log_dir or os.getenv("LOG_DIR", settings.LOG_DIR)

    # Create handlers list
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    try:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "auth_events.log")))
    except (OSError, PermissionError) as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s:%(message)s",
        handlers=handlers
    )


def client_ip(request: Optional[Request]) -> Optional[str]:
    """Client IP address with X-Forwarded-For fallback."""
    if request is None:
        return None
    if request.client:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    user_id: Optional[str] = None,
    request: Optional[Request] = None,
    **fields
) -> None:
    """
    Write one line for an authentication event.

    Args:
        event_type: One of: register_success, register_conflict,
                    login_success, login_failure, logout
        user_id: Account id, when known
        request: FastAPI Request object, for the client address
        fields: Additional context; secret-bearing keys are dropped

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    extra = " ".join(
        f"{key}={value}" for key, value in sorted(fields.items())
        if key not in SECRET_FIELDS
    )
    logger.info(
        "AUTH %s user_id=%s ip=%s timestamp=%s%s",
        event_type, user_id, client_ip(request), datetime.utcnow().isoformat(),
        f" {extra}" if extra else ""
    )
