"""
Best-effort session cache backed by Redis.

Maps an account id to the last token issued for it, with the token's own
lifetime as TTL. The cache exists for revocation bookkeeping only; token
validity never depends on it. Every Redis failure is caught here, logged,
and reported as a ``False``/``None`` result.

The redis client is thread safe and connections are taken from its pool
when a command executes, so one instance is shared by the whole process.
"""
import logging
import time
from datetime import timedelta
from typing import Optional, Union

import redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"


class SessionCache:
    def __init__(self, client: redis.Redis, key_prefix: str = KEY_PREFIX,
                 retry_interval: float = 30) -> None:
        self.r = client
        self._prefix = key_prefix
        self._retry_interval = retry_interval
        self._available = False
        self._last_attempt = 0.0

    @classmethod
    def from_url(cls, url: str, password: Optional[str] = None,
                 socket_timeout: float = 2.0, **kwargs) -> "SessionCache":
        """Build a cache around a new Redis connection pool."""
        logger.debug("New Redis connection at %s", url)
        client = redis.Redis.from_url(
            url,
            password=password,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client, **kwargs)

    def key(self, user_id: str) -> str:
        return f"{self._prefix}{user_id}"

    def connect(self) -> bool:
        """Ping the backend once and record whether it answered."""
        self._last_attempt = time.monotonic()
        try:
            self.r.ping()
        except redis.RedisError as e:
            logger.warning("Redis unavailable, continuing without session cache: %s", e)
            self._available = False
        else:
            if not self._available:
                logger.info("Redis connection established")
            self._available = True
        return self._available

    def is_available(self) -> bool:
        """
        Report current connectivity.

        After an outage the backend is pinged again at most once per
        ``retry_interval`` seconds; in between this answers from the last
        observation.
        """
        if not self._available and time.monotonic() - self._last_attempt >= self._retry_interval:
            self.connect()
        return self._available

    def _failed(self, action: str, user_id: str, error: redis.RedisError) -> None:
        if isinstance(error, (redis.ConnectionError, redis.TimeoutError)):
            self._available = False
            self._last_attempt = time.monotonic()
        logger.warning("Session cache %s failed for user_id=%s: %s", action, user_id, error)

    def put(self, user_id: str, token: str, ttl: Union[int, timedelta]) -> bool:
        """Store ``token`` as the current session, replacing any previous one."""
        if not self.is_available():
            return False
        try:
            self.r.setex(self.key(user_id), ttl, token)
        except redis.RedisError as e:
            self._failed("put", user_id, e)
            return False
        return True

    def delete(self, user_id: str) -> bool:
        """Remove the session entry. Deleting a missing key is not an error."""
        if not self.is_available():
            return False
        try:
            self.r.delete(self.key(user_id))
        except redis.RedisError as e:
            self._failed("delete", user_id, e)
            return False
        return True

    def get(self, user_id: str) -> Optional[str]:
        """Read the current entry, for inspection only. Never a validity check."""
        if not self.is_available():
            return None
        try:
            return self.r.get(self.key(user_id))
        except redis.RedisError as e:
            self._failed("get", user_id, e)
            return None

    def close(self) -> None:
        try:
            self.r.close()
        except redis.RedisError as e:
            logger.warning("Error closing Redis connection: %s", e)
        self._available = False
