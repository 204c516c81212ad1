"""Cart storage adapters and the serialized write path."""
import asyncio
import contextlib
from typing import Optional, Protocol

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from gomarket.config import CART_PERSIST_ATTEMPTS, CART_PERSIST_RETRY_MAX_WAIT
from gomarket.db import TTL, get_redis
from gomarket.errors import CartPersistenceError, ERROR_PERSIST_FAILED
from gomarket.logging import get_logger

logger = get_logger(__name__)


class PersistenceAdapter(Protocol):
    """Asynchronous key-value text storage."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class RedisStorage:
    """Cart storage backed by Upstash Redis."""

    def __init__(self, redis=None, ttl: Optional[int] = TTL.CART):
        self._redis = redis  # Lazy initialization
        self._ttl = ttl

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise ValueError(
                    f"Redis not available: {e}. Check UPSTASH_REDIS_REST_URL and "
                    "UPSTASH_REDIS_REST_TOKEN environment variables."
                ) from e
        return self._redis

    async def get(self, key: str) -> Optional[str]:
        value = await self.redis.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(key, value, ex=self._ttl)


class MemoryStorage:
    """In-process storage for local runs and tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class CartWriter:
    """
    Single-writer queue in front of a storage adapter.

    Writes run one at a time in submission order, so the value left under a
    key is always the last one submitted. Each write is attempted up to
    ``attempts`` times with exponential back-off; a write that still fails
    is logged and kept until the next ``drain()``, which raises it.
    """

    def __init__(
        self,
        storage: PersistenceAdapter,
        attempts: int = CART_PERSIST_ATTEMPTS,
        max_wait: float = CART_PERSIST_RETRY_MAX_WAIT,
    ):
        self._storage = storage
        self._attempts = max(1, attempts)
        self._max_wait = max_wait
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._failures: list[BaseException] = []
        self._pending = 0

    @property
    def pending(self) -> int:
        """Writes submitted but not yet settled."""
        return self._pending

    def submit(self, key: str, value: str) -> None:
        """Enqueue a write; must be called from inside the running event loop."""
        if self._worker is None or self._worker.done():
            loop = asyncio.get_running_loop()
            if self._queue is None:
                self._queue = asyncio.Queue()
            self._worker = loop.create_task(self._run(), name="cart-writer")
        self._pending += 1
        self._queue.put_nowait((key, value))

    async def drain(self) -> None:
        """Wait for every submitted write; raise if any of them failed."""
        if self._queue is not None:
            await self._queue.join()

        if self._failures:
            failures, self._failures = self._failures, []
            raise CartPersistenceError(
                f"{ERROR_PERSIST_FAILED}: {len(failures)} write(s) failed",
                failures=len(failures),
            ) from failures[-1]

    async def close(self) -> None:
        """Let queued writes settle, then stop the worker."""
        if self._queue is not None and self._worker is not None and not self._worker.done():
            await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
            self._queue = None

    async def _run(self) -> None:
        queue = self._queue
        while True:
            key, value = await queue.get()
            try:
                await self._write(key, value)
            except Exception as e:
                logger.error(f"Failed to persist cart under {key!r} after {self._attempts} attempt(s): {e}")
                self._failures.append(e)
            finally:
                self._pending -= 1
                queue.task_done()

    async def _write(self, key: str, value: str) -> None:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=0, max=self._max_wait),
            reraise=True,
        ):
            with attempt:
                await self._storage.set(key, value)
