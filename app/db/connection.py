"""asyncpg connection pool for the analytical warehouse."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Mapping

import asyncpg

logger = logging.getLogger(__name__)

# ``:name`` placeholders; ``::type`` casts are left alone.
_NAMED_PARAM = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")


class WarehouseError(RuntimeError):
    """Raised when the warehouse cannot be reached or a query fails."""


def bind_named_params(template: str, params: Mapping[str, Any] | None = None) -> tuple[str, list]:
    """Rewrite ``:name`` placeholders into asyncpg's positional ``$n`` form.

    A name used more than once is bound to a single positional argument.
    """
    params = params or {}
    positions: dict[str, int] = {}
    args: list = []

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            raise WarehouseError(f"Missing query parameter: {name}")
        if name not in positions:
            args.append(params[name])
            positions[name] = len(args)
        return f"${positions[name]}"

    return _NAMED_PARAM.sub(_replace, template), args


class WarehouseClient:
    """Runs fixed query templates against the warehouse.

    The pool is opened on the first query, so a missing or rejected
    credential surfaces as a failed query rather than a failed startup.
    """

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float | None = None,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is None:
                try:
                    self._pool = await asyncpg.create_pool(
                        dsn=self._dsn,
                        min_size=self._min_size,
                        max_size=self._max_size,
                        command_timeout=self._command_timeout,
                    )
                except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
                    raise WarehouseError(
                        "Failed to connect to the warehouse. Check WAREHOUSE_DSN credentials."
                    ) from exc
        return self._pool

    async def run_query(self, template: str, params: Mapping[str, Any] | None = None) -> list[dict]:
        sql, args = bind_named_params(template, params)
        pool = await self._get_pool()
        logger.debug("Executing warehouse query...")
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *args)
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            logger.error("Warehouse query failed: %s", exc)
            raise WarehouseError(str(exc)) from exc
        logger.info("Query returned %d rows", len(rows))
        return [dict(r) for r in rows]

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
