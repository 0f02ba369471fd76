"""Tests for SlackAppRunner."""

import asyncio
from unittest.mock import AsyncMock, Mock

from slackollama.config import SlackConfig
from slackollama.infrastructure.slack import SlackAppRunner, create_slack_app


def _runner_with_client(client: Mock) -> SlackAppRunner:
    runner = SlackAppRunner(Mock(), "xapp-token")
    handler = Mock()
    handler.client = client
    handler.close_async = AsyncMock()
    runner._handler = handler
    return runner


class TestCreateSlackApp:
    """create_slack_app() tests."""

    def test_uses_bot_token(self) -> None:
        """Test that the app is created with the bot token."""
        app = create_slack_app(
            SlackConfig(bot_token="xoxb-test", app_token="xapp-test")
        )

        assert app.client.token == "xoxb-test"


class TestSlackAppRunnerIsConnected:
    """Tests for is_connected."""

    async def test_false_before_start(self) -> None:
        """Test that is_connected returns False before start() is called."""
        runner = SlackAppRunner(Mock(), "xapp-token")

        assert await runner.is_connected() is False

    async def test_delegates_to_socket_mode_client(self) -> None:
        """Test that the Socket Mode client is asked."""
        client = Mock()
        client.is_connected = AsyncMock(return_value=True)
        runner = _runner_with_client(client)

        assert await runner.is_connected() is True

        client.is_connected.return_value = False
        assert await runner.is_connected() is False


class TestFrameListeners:
    """Frame forwarding tests."""

    async def test_frames_reach_listeners(self) -> None:
        """Test that each listener receives the decoded frame."""
        runner = SlackAppRunner(Mock(), "xapp-token")
        first = AsyncMock()
        second = AsyncMock()
        runner.add_frame_listener(first)
        runner.add_frame_listener(second)

        await runner._on_frame(Mock(), {"type": "hello"}, '{"type":"hello"}')

        first.assert_awaited_once_with({"type": "hello"})
        second.assert_awaited_once_with({"type": "hello"})

    async def test_failing_listener_does_not_block_others(self) -> None:
        """Test that listener errors are logged and skipped."""
        runner = SlackAppRunner(Mock(), "xapp-token")
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        working = AsyncMock()
        runner.add_frame_listener(failing)
        runner.add_frame_listener(working)

        await runner._on_frame(Mock(), {"type": "events_api"}, None)

        working.assert_awaited_once()


class TestSlackAppRunnerClose:
    """Tests for close."""

    async def test_close_before_start(self) -> None:
        """Test that closing an unstarted runner succeeds."""
        runner = SlackAppRunner(Mock(), "xapp-token")

        assert await runner.close() is True

    async def test_close_success(self) -> None:
        """Test closing the handler."""
        runner = _runner_with_client(Mock())

        assert await runner.close(timeout=1.0) is True
        runner._handler.close_async.assert_awaited_once()

    async def test_close_timeout(self) -> None:
        """Test that a hanging close reports a timeout."""
        runner = _runner_with_client(Mock())

        async def hang() -> None:
            await asyncio.sleep(10)

        runner._handler.close_async = hang

        assert await runner.close(timeout=0.01) is False
