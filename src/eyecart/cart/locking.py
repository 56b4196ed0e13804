"""Per-user serialization of cart operations.

Every mutation of a user's cart, and every totals read, runs while holding
that user's cart lock, so merges and breakdowns never observe a half-applied
change. Two backends:

- ``memory``: a registry of re-entrant thread locks, one per user (single process).
- ``redis``: ``SET NX PX`` with a token, released by a compare-and-delete
  Lua script so a worker can never free a lock it no longer owns.

Failing to get the lock in time raises CartBusy, a transient failure.
"""

import threading
import time
import uuid
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager

import redis
import structlog
from protean.utils.globals import current_domain
from redis.exceptions import RedisError

from eyecart.settings import lock_backend, lock_timeout_seconds, lock_ttl_seconds, redis_url
from eyecart.shared.errors import CartBusy

logger = structlog.get_logger(__name__)

# Compare-and-delete: only the holder's token may release the key
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class CartLock(ABC):
    """Abstract per-user cart lock."""

    @abstractmethod
    def acquire(self, user_id: str, timeout: float):
        """Block until the user's lock is held and return a release token.

        Raises CartBusy when the lock cannot be obtained within ``timeout``.
        """
        ...

    @abstractmethod
    def release(self, user_id: str, token) -> None: ...

    @contextmanager
    def hold(self, user_id, timeout: float | None = None):
        user_id = str(user_id)
        token = self.acquire(user_id, lock_timeout_seconds() if timeout is None else timeout)
        try:
            yield
        finally:
            self.release(user_id, token)


class InProcessCartLock(CartLock):
    def __init__(self) -> None:
        self._guard = threading.Lock()
        # A user's lock lives only while some caller holds or waits on it
        self._locks: weakref.WeakValueDictionary[str, threading.RLock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.RLock()
            return lock

    def acquire(self, user_id: str, timeout: float):
        lock = self._lock_for(user_id)
        if not lock.acquire(timeout=timeout):
            logger.warning("Cart lock timed out", user_id=user_id, timeout=timeout)
            raise CartBusy("Cart is busy, try again", user_id=user_id)
        return lock

    def release(self, user_id: str, token) -> None:
        token.release()


class RedisCartLock(CartLock):
    def __init__(self, client=None, url: str | None = None, ttl_seconds: int | None = None, poll_interval: float = 0.05):
        self.redis = client or redis.Redis.from_url(url or redis_url(), decode_responses=True)
        self.ttl_ms = int((ttl_seconds or lock_ttl_seconds()) * 1000)
        self.poll_interval = poll_interval

    @staticmethod
    def key_for(user_id: str) -> str:
        return f"cart:{user_id}:lock"

    def acquire(self, user_id: str, timeout: float):
        key = self.key_for(user_id)
        token = uuid.uuid4().hex
        deadline = time.monotonic() + timeout

        while True:
            try:
                if self.redis.set(name=key, value=token, nx=True, px=self.ttl_ms):
                    return token
            except RedisError as exc:
                logger.error("Cart lock backend unavailable", user_id=user_id, error=str(exc))
                raise CartBusy("Cart lock backend unavailable", user_id=user_id) from exc

            if time.monotonic() >= deadline:
                logger.warning("Cart lock timed out", user_id=user_id, timeout=timeout)
                raise CartBusy("Cart is busy, try again", user_id=user_id)
            time.sleep(self.poll_interval)

    def release(self, user_id: str, token) -> None:
        key = self.key_for(user_id)
        try:
            released = self.redis.eval(_RELEASE_LUA, 1, key, token)
        except RedisError as exc:
            # The key expires on its own after the TTL
            logger.error("Cart lock release failed", user_id=user_id, error=str(exc))
            return
        if not released:
            logger.warning("Cart lock expired before release", user_id=user_id)


_current_lock: CartLock | None = None


def get_cart_lock() -> CartLock:
    """Return the configured cart lock (singleton), chosen by CART_LOCK_BACKEND."""
    global _current_lock
    if _current_lock is None:
        backend = lock_backend()
        if backend == "memory":
            _current_lock = InProcessCartLock()
        elif backend == "redis":
            _current_lock = RedisCartLock()
        else:
            raise ValueError(f"Unknown cart lock backend: {backend}")
    return _current_lock


def set_cart_lock(lock: CartLock) -> None:
    global _current_lock
    _current_lock = lock


def reset_cart_lock() -> None:
    global _current_lock
    _current_lock = None


def process_for_user(user_id, command):
    """Process a cart command synchronously while holding the user's cart lock.

    The lock spans the whole unit of work, including its commit.
    """
    with get_cart_lock().hold(user_id):
        return current_domain.process(command, asynchronous=False)
