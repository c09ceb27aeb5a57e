"""
Per-owner mutual exclusion for ingestion runs.

Two uploads for the same owner would otherwise interleave their delete and
insert stages. An owner lock is a callable ``owner_id -> context manager``;
the service holds it around the whole replace-persist sequence.
"""

import logging
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

import redis
from redis.exceptions import LockError

from services.exceptions import IngestInProgressError

logger = logging.getLogger(__name__)

OwnerLock = Callable[[str], ContextManager[None]]

LOCK_KEY_PREFIX = 'ingest_lock'
DEFAULT_LOCK_TIMEOUT = 300
DEFAULT_BLOCKING_TIMEOUT = 5.0


@contextmanager
def null_owner_lock(owner_id: str) -> Iterator[None]:
    """No-op lock; concurrent runs for one owner are not serialized."""
    yield


class RedisOwnerLock:
    """
    Owner lock backed by a redis lock key per owner.

    Args:
        redis_client: Connected redis client
        timeout: Seconds after which a held lock expires on its own
        blocking_timeout: Seconds to wait for a held lock before giving up
    """

    def __init__(self, redis_client: redis.Redis,
                 timeout: int = DEFAULT_LOCK_TIMEOUT,
                 blocking_timeout: float = DEFAULT_BLOCKING_TIMEOUT):
        self.redis_client = redis_client
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout

    @contextmanager
    def __call__(self, owner_id: str) -> Iterator[None]:
        lock = self.redis_client.lock(
            f'{LOCK_KEY_PREFIX}:{owner_id}',
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout
        )

        if not lock.acquire():
            logger.warning(f"Ingestion already running for owner {owner_id}")
            raise IngestInProgressError(owner_id)

        logger.debug(f"Acquired ingest lock for owner {owner_id}")
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError as e:
                # Lock expired mid-run; another run may already own the key.
                logger.warning(f"Could not release ingest lock for owner {owner_id}: {e}")
