"""Socket Mode liveness monitoring."""

import logging
from typing import Any

from slackollama.application.services.connection_watchdog import (
    ConnectionWatchdog,
    WatchdogState,
)
from slackollama.infrastructure.slack.client import SlackAppRunner

logger = logging.getLogger(__name__)


class SocketModeLivenessMonitor:
    """Feeds Socket Mode connection signals into the watchdog.

    Every inbound frame counts as traffic, and a ``hello`` frame (sent by
    Slack on each new connection) counts as ready. Disconnects are observed
    by probing the session on every tick, since Slack's own ``disconnect``
    frames are consumed by the client before reaching listeners.
    """

    def __init__(self, runner: SlackAppRunner, watchdog: ConnectionWatchdog) -> None:
        """Initialize the monitor.

        Args:
            runner: Slack app runner to probe.
            watchdog: Watchdog receiving the signals.
        """
        self._runner = runner
        self._watchdog = watchdog
        self._was_connected = False

    async def on_frame(self, message: dict[str, Any]) -> None:
        """Handle one inbound Socket Mode frame."""
        self._watchdog.touch()
        if message.get("type") == "hello":
            logger.info("Socket Mode connection ready")
            self._was_connected = True
            self._watchdog.on_ready()

    async def probe(self) -> bool:
        """Check the connection and report transitions to the watchdog.

        Returns:
            Whether the connection is currently up.
        """
        connected = await self._runner.is_connected()

        if connected:
            if (
                not self._was_connected
                and self._watchdog.state is WatchdogState.DISCONNECTED
            ):
                self._watchdog.on_ready()
            self._watchdog.touch()
        elif self._was_connected:
            self._watchdog.on_disconnect()

        self._was_connected = connected
        return connected

    async def tick(self) -> None:
        """Probe the connection, then run the watchdog's stale check."""
        await self.probe()
        await self._watchdog.check()
