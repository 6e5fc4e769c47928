"""
Fixed-interval background task.

Runs a callback every ``interval`` seconds on the event loop. The first
invocation happens one interval after start, and the interval is slept
between invocations (the callback's own run time is not subtracted).
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from shared.reporter import SystemReporter


class PeriodicTask:
    """
    Repeating asyncio task with a fixed sleep between invocations.

    A failing callback is logged and the schedule continues.

    Attributes:
        interval: Seconds slept before each invocation
        name: Task name used in log messages
        invocations: Number of completed callback invocations
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Any],
        reporter: SystemReporter,
        name: str = "periodic",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.interval = interval
        self.name = name
        self.reporter = reporter
        self.invocations = 0
        self._callback = callback
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        """Check if the loop task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop (no-op if already running)."""
        if self.is_running:
            return

        self._task = asyncio.create_task(self._run(), name=self.name)
        self.reporter.info(
            f"{self.name} started (interval: {self.interval}s)",
            context="PeriodicTask",
            verbose_level=2,
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        self.reporter.info(
            f"{self.name} stopped after {self.invocations} runs",
            context="PeriodicTask",
            verbose_level=2,
        )

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)

            try:
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.reporter.error(
                    f"{self.name} run failed: {type(e).__name__}: {e}",
                    context="PeriodicTask",
                    exc_info=True,
                )

            self.invocations += 1
