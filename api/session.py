"""Shoe sessions: signed tokens, a Redis store and an in-memory fallback."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config
from core.tracker import ShoeTracker

logger = logging.getLogger(__name__)

SessionData = dict[str, Any]

# Session data keys
SESSION_KEY_TRACKER = "tracker"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


class SessionSigner:
    """Issue and check signed session tokens."""

    def __init__(self, secret_key: str | None = None, salt: str = "shoe-session") -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt=salt,
        )

    def sign(self, session_id: str) -> str:
        """Wrap a raw session ID in a signed, timestamped token."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Return the raw session ID inside a token.

        Args:
            token: Signed token from the X-Session-ID header
            max_age: Maximum token age in seconds (defaults to session_ttl)

        Returns:
            The session ID, or None if the token is forged or expired
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except BadSignature:
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the process-wide signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def new_session_token() -> str:
    """Create a signed token for a fresh session."""
    return get_session_signer().sign(uuid4().hex)


def extract_session_id(token: str) -> str | None:
    """Return the raw session ID of a token, or None if it does not verify."""
    return get_session_signer().unsign(token)


class SessionStore(ABC):
    """Key-value store for session data with expiry."""

    @abstractmethod
    async def get(self, token: str) -> SessionData | None:
        """Return the session data, or None if missing or expired."""

    @abstractmethod
    async def set(self, token: str, data: SessionData, ttl: int | None = None) -> None:
        """Store session data, resetting its expiry."""

    @abstractmethod
    async def delete(self, token: str) -> None:
        """Remove a session if present."""


class InMemorySessionStore(SessionStore):
    """Process-local store used when Redis is unreachable."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._sessions: dict[str, tuple[SessionData, float]] = {}

    async def get(self, token: str) -> SessionData | None:
        entry = self._sessions.get(token)
        if entry is None:
            return None
        data, deadline = entry
        if deadline <= self._clock():
            del self._sessions[token]
            return None
        return data

    async def set(self, token: str, data: SessionData, ttl: int | None = None) -> None:
        purged = self.purge_expired()
        if purged:
            logger.debug("Purged %d expired sessions", purged)
        self._sessions[token] = (data, self._clock() + (ttl or config.session_ttl))

    async def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""
        now = self._clock()
        expired = [token for token, (_, deadline) in self._sessions.items() if deadline <= now]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """Redis store; session data is kept as JSON under a prefixed key."""

    prefix = "baccarat:session:"

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    def _key(self, token: str) -> str:
        return f"{self.prefix}{token}"

    async def get(self, token: str) -> SessionData | None:
        raw = await self._redis.get(self._key(token))
        return None if raw is None else json.loads(raw)

    async def set(self, token: str, data: SessionData, ttl: int | None = None) -> None:
        await self._redis.set(self._key(token), json.dumps(data), ex=ttl or config.session_ttl)

    async def delete(self, token: str) -> None:
        await self._redis.delete(self._key(token))


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """
    Return the process-wide session store.

    The first call pings Redis at ``config.redis.url``. If Redis cannot be
    reached the in-memory store is used for the life of the process.
    """
    global _session_store
    if _session_store is not None:
        return _session_store

    client = redis.from_url(config.redis.url)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis unavailable (%s), keeping sessions in memory", exc)
        _session_store = InMemorySessionStore()
    else:
        logger.info("Using Redis session store at %s:%d", config.redis.host, config.redis.port)
        _session_store = RedisSessionStore(client)
    return _session_store


async def create_session(data: SessionData | None = None) -> str:
    """Store a new session and return its signed token."""
    store = await get_session_store()
    token = new_session_token()
    await store.set(token, data or {})
    logger.info("Created session %s", token[:8])
    return token


async def load_tracker(token: str) -> ShoeTracker | None:
    """Restore the session's tracker, or None if the session has none."""
    store = await get_session_store()
    data = await store.get(token)
    if not data or not data.get(SESSION_KEY_TRACKER):
        return None
    return ShoeTracker.from_dict(data[SESSION_KEY_TRACKER])


async def save_tracker(token: str, tracker: ShoeTracker) -> None:
    """Persist the tracker into its session."""
    store = await get_session_store()
    data = await store.get(token) or {}
    now = int(time.time())
    data[SESSION_KEY_TRACKER] = tracker.to_dict()
    data[SESSION_KEY_LAST_ACTIVITY] = now
    data.setdefault(SESSION_KEY_CREATED_AT, now)
    await store.set(token, data)
