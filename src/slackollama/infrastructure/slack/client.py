"""Slack Bolt client and runner."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.socket_mode.async_client import AsyncBaseSocketModeClient

from slackollama.config import SlackConfig

logger = logging.getLogger(__name__)

FrameListener = Callable[[dict[str, Any]], Awaitable[None]]


def create_slack_app(config: SlackConfig) -> AsyncApp:
    """Create a Slack Bolt application.

    Args:
        config: Slack connection settings.

    Returns:
        Configured AsyncApp instance.
    """
    return AsyncApp(token=config.bot_token)


class SlackAppRunner:
    """Manage Slack application execution.

    This class handles starting and stopping the Slack app
    using Socket Mode, and forwards every inbound Socket Mode frame
    to registered frame listeners.
    """

    def __init__(self, app: AsyncApp, app_token: str) -> None:
        """Initialize the runner.

        Args:
            app: AsyncApp instance.
            app_token: App-Level Token for Socket Mode.
        """
        self._app = app
        self._app_token = app_token
        self._handler: AsyncSocketModeHandler | None = None
        self._frame_listeners: list[FrameListener] = []

    def add_frame_listener(self, listener: FrameListener) -> None:
        """Register a callback receiving each inbound frame as a dict.

        Args:
            listener: Async callable taking the decoded frame.
        """
        self._frame_listeners.append(listener)

    async def start(self) -> None:
        """Start the app using Socket Mode (async)."""
        self._handler = AsyncSocketModeHandler(self._app, self._app_token)
        self._handler.client.message_listeners.append(self._on_frame)
        await self._handler.start_async()

    async def _on_frame(
        self,
        client: AsyncBaseSocketModeClient,
        message: dict[str, Any],
        raw_message: str | None,
    ) -> None:
        for listener in self._frame_listeners:
            try:
                await listener(message)
            except Exception:
                logger.exception("Frame listener failed")

    async def is_connected(self) -> bool:
        """Check if the Socket Mode session is open and not stale."""
        if self._handler is None:
            return False
        return await self._handler.client.is_connected()

    async def close(self, timeout: float = 5.0) -> bool:
        """Close the handler with timeout.

        Args:
            timeout: Maximum seconds to wait for close.

        Returns:
            True if closed successfully, False if timed out.
        """
        if self._handler is None:
            return True
        try:
            await asyncio.wait_for(self._handler.close_async(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
