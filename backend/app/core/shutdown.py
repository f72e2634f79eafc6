"""
Graceful shutdown for the employee records service.

On lifespan exit the service stops accepting requests, waits for the ones
already running to finish, then closes its outbound resources: the Kafka
producer, the cache backend and the database pool.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

from starlette.responses import JSONResponse

logger = logging.getLogger("employees.shutdown")

Closer = Callable[[], Awaitable[None]]


class GracefulShutdownManager:
    """
    Tracks in-flight requests and owns the list of resource closers.
    Closers run in registration order; a failing closer is logged and skipped.
    """

    def __init__(self, drain_timeout: float = 30.0, poll_interval: float = 0.5):
        self.drain_timeout = drain_timeout
        self.poll_interval = poll_interval
        self._closers: list[tuple[str, Closer]] = []
        self._in_flight = 0
        self._draining = False
        self._closed = False

    @property
    def draining(self) -> bool:
        return self._draining

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def reset(self) -> None:
        """Forget closers and reopen for traffic; called when a lifespan starts."""
        self._closers.clear()
        self._draining = False
        self._closed = False

    def register(self, name: str, closer: Closer) -> None:
        self._closers.append((name, closer))

    @asynccontextmanager
    async def track_request(self):
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    async def _wait_for_drain(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.drain_timeout
        while self._in_flight > 0:
            if loop.time() >= deadline:
                logger.warning(f"Drain timeout reached with {self._in_flight} requests still running")
                return
            await asyncio.sleep(self.poll_interval)

    async def shutdown(self) -> None:
        if self._closed:
            return
        self._draining = True
        logger.info(f"Shutting down, waiting for {self._in_flight} in-flight requests")
        await self._wait_for_drain()

        for name, closer in self._closers:
            try:
                await closer()
                logger.info(f"Closed {name}")
            except Exception as e:
                logger.error(f"Failed to close {name}: {e}")

        self._closed = True
        logger.info("Shutdown complete")


_shutdown_manager: Optional[GracefulShutdownManager] = None


def get_shutdown_manager() -> GracefulShutdownManager:
    global _shutdown_manager
    if _shutdown_manager is None:
        _shutdown_manager = GracefulShutdownManager()
    return _shutdown_manager


@asynccontextmanager
async def lifespan_manager(app):
    """FastAPI lifespan: pick the cache backend up front, release everything on exit."""
    from app.core.cache import close_cache, get_cache
    from app.db.session import engine
    from app.services.messaging import close_kafka_producer_service

    # The middleware holds this same instance, so reset it rather than replace it
    manager = get_shutdown_manager()
    manager.reset()
    manager.register("kafka producer", close_kafka_producer_service)
    manager.register("cache", close_cache)
    manager.register("database pool", engine.dispose)

    backend = await get_cache()
    logger.info(f"Startup complete, cache backend: {type(backend).__name__}")

    try:
        yield
    finally:
        await manager.shutdown()


class RequestTrackingMiddleware:
    """
    Counts in-flight HTTP requests and answers 503 once draining has begun.
    """

    def __init__(self, app, manager: Optional[GracefulShutdownManager] = None):
        self.app = app
        self.manager = manager or get_shutdown_manager()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if self.manager.draining:
            response = JSONResponse(
                {"error": "Service is shutting down", "retry_after": 5},
                status_code=503,
                headers={"Connection": "close", "Retry-After": "5"},
            )
            await response(scope, receive, send)
            return

        async with self.manager.track_request():
            await self.app(scope, receive, send)
