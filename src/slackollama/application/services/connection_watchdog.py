"""Connection health watchdog."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from slackollama.config import WatchdogConfig

logger = logging.getLogger(__name__)


class WatchdogState(Enum):
    """Gateway connection states tracked by the watchdog."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    SHUTTING_DOWN = "shutting_down"


class ConnectionWatchdog:
    """Detects a dead gateway connection and restarts the process.

    Recovery is crash-and-restart: the watchdog closes shared resources,
    waits a short grace period and terminates the process so that the
    supervisor starts a clean one. Disconnects schedule this with
    exponential backoff; a ready signal in the meantime cancels it. A
    connection that stays silent past the stale threshold is terminated
    without waiting for a disconnect signal.

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        terminate: Callable[[int], None],
        on_shutdown: Callable[[], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the watchdog.

        Args:
            config: Watchdog configuration.
            terminate: Called with the exit code to end the process.
            on_shutdown: Cleanup run before terminating (e.g. closing the store).
            clock: Monotonic clock in seconds.
        """
        self._config = config
        self._terminate = terminate
        self._on_shutdown = on_shutdown
        self._clock = clock
        self._state = WatchdogState.CONNECTED
        self._last_heartbeat = clock()
        self._reconnect_attempts = 0
        self._shutting_down = False
        self._pending: asyncio.Task[None] | None = None

    @property
    def state(self) -> WatchdogState:
        """Current connection state."""
        return self._state

    @property
    def last_heartbeat(self) -> float:
        """Clock value of the last liveness signal."""
        return self._last_heartbeat

    @property
    def reconnect_attempts(self) -> int:
        """Disconnects observed since the last ready signal."""
        return self._reconnect_attempts

    @property
    def shutting_down(self) -> bool:
        """Check if self-heal has started."""
        return self._shutting_down

    @property
    def stale_threshold(self) -> float:
        """Seconds of silence after which the connection is considered dead."""
        if self._config.stale_threshold_seconds is not None:
            return self._config.stale_threshold_seconds
        return self._config.heartbeat_interval_seconds * 2

    def backoff_delay(self, attempt: int) -> float:
        """Self-heal delay for the given disconnect attempt (1-based).

        Args:
            attempt: Number of consecutive disconnects.

        Returns:
            Delay in seconds, capped at the configured maximum.
        """
        delay = self._config.reconnect_base_delay_seconds * 2 ** max(attempt - 1, 0)
        return min(delay, self._config.reconnect_max_delay_seconds)

    def touch(self) -> None:
        """Record inbound traffic."""
        if self._shutting_down:
            return
        self._last_heartbeat = self._clock()

    def on_ready(self) -> None:
        """Handle a ready/resumed signal from the gateway."""
        if self._shutting_down:
            return
        if self._state is WatchdogState.DISCONNECTED:
            logger.info(
                "Gateway connection restored after %d disconnect(s)",
                self._reconnect_attempts,
            )
        self._cancel_pending()
        self._state = WatchdogState.CONNECTED
        self._reconnect_attempts = 0
        self._last_heartbeat = self._clock()

    def on_disconnect(self) -> float | None:
        """Handle a disconnect signal and schedule self-heal.

        Returns:
            The scheduled delay in seconds, or None if shutting down.
        """
        if self._shutting_down:
            return None

        self._reconnect_attempts += 1
        self._state = WatchdogState.DISCONNECTED
        delay = self.backoff_delay(self._reconnect_attempts)
        logger.warning(
            "Gateway disconnected (attempt %d); self-heal in %.1fs",
            self._reconnect_attempts,
            delay,
        )

        self._cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(
            self._delayed_self_heal(delay)
        )
        return delay

    async def check(self) -> bool:
        """Check for a silently dead connection.

        Returns:
            True if the connection was judged stale.
        """
        if self._shutting_down or self._state is not WatchdogState.CONNECTED:
            return False

        silence = self._clock() - self._last_heartbeat
        if silence <= self.stale_threshold:
            return False

        await self.self_heal(f"no gateway traffic for {silence:.0f}s")
        return True

    async def self_heal(self, reason: str) -> None:
        """Terminate the process so the supervisor restarts it.

        Runs at most once. In observe-only mode only logs.

        Args:
            reason: Why self-heal was triggered (for logging).
        """
        if self._shutting_down:
            return

        if not self._config.self_heal:
            logger.warning("Self-heal disabled; would restart: %s", reason)
            return

        self._shutting_down = True
        self._state = WatchdogState.SHUTTING_DOWN
        logger.error("Self-healing: %s", reason)

        if self._pending is not None and self._pending is not asyncio.current_task():
            self._pending.cancel()
        self._pending = None

        if self._on_shutdown is not None:
            try:
                await self._on_shutdown()
            except Exception as e:
                logger.warning("Cleanup before restart failed: %s", e)

        await asyncio.sleep(self._config.shutdown_grace_seconds)
        self._terminate(1)

    async def stop(self) -> None:
        """Cancel any scheduled self-heal (graceful shutdown)."""
        self._cancel_pending()

    async def _delayed_self_heal(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.self_heal(
            f"gateway still disconnected after {self._reconnect_attempts} attempt(s)"
        )

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
