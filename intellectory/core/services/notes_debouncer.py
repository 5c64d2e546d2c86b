"""Debounced persistence of the per-team notes text."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import IntellectoryError

logger = get_logger(__name__)

NotesWriter = Callable[[SessionContext, str], Awaitable[Any]]


class NotesDebouncer:
    """
    Coalesce rapid note edits into one write per team.

    Each submit restarts the team's timer; only the latest text is written
    once `delay` seconds pass without another submit. `flush()` writes
    whatever is pending immediately and is called on shutdown.
    """

    def __init__(self, writer: NotesWriter, delay: float = 1.0):
        self._writer = writer
        self._delay = delay
        self._pending: dict[str, tuple[SessionContext, str]] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def pending_teams(self) -> list[str]:
        return list(self._pending)

    def submit(self, ctx: SessionContext, text: str) -> None:
        self._pending[ctx.team_id] = (ctx, text)

        task = self._tasks.pop(ctx.team_id, None)
        if task is not None:
            task.cancel()
        self._tasks[ctx.team_id] = asyncio.create_task(self._write_later(ctx.team_id))

    async def flush(self, team_id: str | None = None) -> None:
        team_ids = [team_id] if team_id else list(self._pending)
        current = asyncio.current_task()
        for tid in team_ids:
            task = self._tasks.pop(tid, None)
            if task is not None and task is not current:
                task.cancel()
            await self._write(tid)

    async def _write_later(self, team_id: str) -> None:
        await asyncio.sleep(self._delay)
        self._tasks.pop(team_id, None)
        await self._write(team_id)

    async def _write(self, team_id: str) -> None:
        pending = self._pending.pop(team_id, None)
        if pending is None:
            return
        ctx, text = pending
        try:
            await self._writer(ctx, text)
        except IntellectoryError as e:
            logger.error("notes_write_failed", team_id=team_id, error=e.message)
        except Exception:
            logger.exception("notes_write_failed", team_id=team_id)
        else:
            logger.debug("notes_flushed", team_id=team_id, length=len(text))
