"""Cancelable one-shot and periodic tasks on the running event loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

_logger = logging.getLogger(__name__)

AsyncCallback = Callable[[], Awaitable[None]]


@dataclass
class ScheduledTask:
    """Handle for a scheduled callback."""

    name: str
    task: asyncio.Task[None]

    @property
    def done(self) -> bool:
        return self.task.done()

    def cancel(self) -> None:
        """Cancel the callback if it has not finished yet."""
        if not self.task.done():
            self.task.cancel()


def schedule_once(name: str, delay: float, callback: AsyncCallback) -> ScheduledTask:
    """Run ``callback`` once after ``delay`` seconds."""

    async def runner() -> None:
        await asyncio.sleep(delay)
        await _run_logged(name, callback)

    return ScheduledTask(name=name, task=asyncio.get_running_loop().create_task(runner()))


def schedule_every(name: str, interval: float, callback: AsyncCallback) -> ScheduledTask:
    """Run ``callback`` every ``interval`` seconds until cancelled."""

    async def runner() -> None:
        while True:
            await asyncio.sleep(interval)
            await _run_logged(name, callback)

    return ScheduledTask(name=name, task=asyncio.get_running_loop().create_task(runner()))


async def _run_logged(name: str, callback: AsyncCallback) -> None:
    try:
        await callback()
    except asyncio.CancelledError:
        raise
    except Exception:
        _logger.exception("Scheduled task %s failed", name)
