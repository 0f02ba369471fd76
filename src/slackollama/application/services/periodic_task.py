"""Periodic task service."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Periodic task runner.

    Executes an async action at a fixed interval.
    Runs as an asyncio task and gracefully shuts down on stop signal.
    """

    def __init__(
        self,
        name: str,
        action: Callable[[], Awaitable[Any]],
        interval_seconds: float,
    ) -> None:
        """Initialize PeriodicTask.

        Args:
            name: Task name (for logging).
            action: Action to execute periodically.
            interval_seconds: Seconds between executions.
        """
        self._name = name
        self._action = action
        self._interval_seconds = interval_seconds
        # _stop_event uses inverted logic:
        # - set() means "stop signal active" (not running)
        # - clear() means "no stop signal" (running)
        # Initially stopped.
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    @property
    def name(self) -> str:
        """Task name."""
        return self._name

    async def start(self) -> None:
        """Start periodic execution.

        Continues looping until stop signal is received.
        If already running, this method returns immediately after logging a warning.
        """
        if not self._stop_event.is_set():
            logger.warning("PeriodicTask '%s' already running; ignoring.", self._name)
            return
        self._stop_event.clear()

        while not self._stop_event.is_set():
            # Wait for stop signal or timeout
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._interval_seconds,
                )
                break  # Stop signal received
            except asyncio.TimeoutError:
                pass  # Timeout, run the action

            await self._run_once()

    async def _run_once(self) -> None:
        try:
            await self._action()
        except Exception as e:
            logger.error(
                "Periodic task '%s' failed (interval=%ss): %s",
                self._name,
                self._interval_seconds,
                e,
            )

    async def stop(self) -> None:
        """Signal the task to stop.

        Signals the loop to stop after current processing completes.
        This method does not wait for the loop task to finish; callers
        should await the task running start() if they need to wait for
        completion.
        """
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if the task is running.

        Returns:
            True if running, False otherwise.
        """
        return not self._stop_event.is_set()
