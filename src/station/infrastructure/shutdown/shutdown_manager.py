"""
Graceful shutdown manager.

Handles:
- Signal registration (SIGTERM, SIGINT)
- Shutdown state tracking
- Ordered shutdown callbacks (stop telemetry, close session)
"""

import asyncio
import signal
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class ShutdownState(Enum):
    """Shutdown state enum."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Manages graceful shutdown of the station agent.

    Coordinates shutdown sequence:
    1. Catch shutdown signals
    2. Mark the manager SHUTTING_DOWN
    3. Run registered callbacks in order, then release waiters
    4. Let the owner mark shutdown complete

    Attributes:
        state: Current shutdown state
        shutdown_timeout: Max seconds to wait for shutdown
        shutdown_started_at: Timestamp when shutdown initiated
        shutdown_reason: Signal name or reason passed to initiate_shutdown
    """

    def __init__(
        self,
        shutdown_timeout: int = 10,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize shutdown manager.

        Args:
            shutdown_timeout: Maximum seconds to wait for complete shutdown
            reporter: Optional SystemReporter for logging
        """
        self.shutdown_timeout = shutdown_timeout
        self.reporter = reporter

        self.state = ShutdownState.RUNNING
        self.shutdown_started_at: Optional[datetime] = None
        self.shutdown_reason: Optional[str] = None
        self._shutdown_event = asyncio.Event()
        self._shutdown_callbacks: List[Callable] = []
        self._original_handlers = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown_task: Optional[asyncio.Task] = None

    def is_shutting_down(self) -> bool:
        """
        Check if shutdown is in progress.

        Returns:
            True if shutting down, False otherwise
        """
        return self.state in (ShutdownState.SHUTTING_DOWN, ShutdownState.SHUTDOWN)

    def register_shutdown_callback(self, callback: Callable) -> None:
        """
        Register callback to be called on shutdown.

        Callbacks are called in registration order.

        Args:
            callback: Sync or async function to call on shutdown
        """
        self._shutdown_callbacks.append(callback)

    def setup_signal_handlers(self) -> None:
        """
        Setup signal handlers for graceful shutdown.

        Registers handlers for:
        - SIGTERM (service manager stop)
        - SIGINT (Ctrl+C)

        Must be called from the thread running the event loop.
        Preserves original handlers for restoration.
        """
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

        self._original_handlers = {
            signal.SIGTERM: signal.getsignal(signal.SIGTERM),
            signal.SIGINT: signal.getsignal(signal.SIGINT),
        }

        for sig in (signal.SIGTERM, signal.SIGINT):
            signal.signal(sig, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        """
        Restore original signal handlers.

        Called after shutdown complete.
        """
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers = {}

    def _handle_signal(self, signum: int, frame) -> None:
        """
        Handle shutdown signal.

        Schedules the shutdown sequence on the event loop.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        sig_name = signal.Signals(signum).name
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._schedule_shutdown, sig_name)

    def _schedule_shutdown(self, reason: str) -> None:
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.ensure_future(self.initiate_shutdown(reason))

    async def initiate_shutdown(self, reason: str = "manual") -> None:
        """
        Initiate graceful shutdown sequence.

        Runs the registered callbacks, then releases wait_for_shutdown.

        Args:
            reason: Reason for shutdown (signal name, manual, etc.)
        """
        if self.state != ShutdownState.RUNNING:
            return

        self.state = ShutdownState.SHUTTING_DOWN
        self.shutdown_started_at = datetime.now(timezone.utc)
        self.shutdown_reason = reason

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown initiated ({reason})",
                context="ShutdownManager",
                verbose_level=1,
            )

        for callback in self._shutdown_callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback()
                else:
                    callback()
            except Exception as e:
                # Continue shutdown even if callback fails
                if self.reporter:
                    self.reporter.error(
                        f"Shutdown callback {getattr(callback, '__name__', callback)} "
                        f"failed: {e}",
                        context="ShutdownManager",
                    )

        self._shutdown_event.set()

    async def wait_for_shutdown(self) -> None:
        """
        Wait for the shutdown sequence to finish its callbacks.

        Blocks until a shutdown signal was received and handled.
        """
        await self._shutdown_event.wait()

    def mark_shutdown_complete(self) -> None:
        """
        Mark shutdown as complete.

        Called after all cleanup is done.
        """
        self.state = ShutdownState.SHUTDOWN
        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown complete",
                context="ShutdownManager",
                verbose_level=1,
            )
