"""Lifespan middleware - opens resources on startup, closes them on shutdown."""

from typing import Any

from psycopg_pool import AsyncConnectionPool


class LifespanMiddleware:
    """Opens the records counter pools when the ASGI server starts."""

    def __init__(self, *pools: AsyncConnectionPool) -> None:
        self._pools = pools

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        for pool in self._pools:
            await pool.open()

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        for pool in reversed(self._pools):
            await pool.close()
