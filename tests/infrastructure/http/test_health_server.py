"""Tests for HealthServer."""

from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest

from slackollama.application.services import WatchdogState
from slackollama.infrastructure.http.health_server import HealthServer


@pytest.fixture
def mock_watchdog() -> Mock:
    """Create a mock ConnectionWatchdog."""
    mock = Mock()
    mock.shutting_down = False
    mock.state = WatchdogState.CONNECTED
    mock.reconnect_attempts = 0
    return mock


@pytest.fixture
def mock_slack_runner() -> Mock:
    """Create a mock SlackAppRunner."""
    mock = Mock()
    mock.is_connected = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_store() -> Mock:
    """Create a mock KeyValueStore."""
    mock = Mock()
    mock.is_healthy = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def server(
    mock_watchdog: Mock, mock_slack_runner: Mock, mock_store: Mock
) -> HealthServer:
    """Create HealthServer instance."""
    return HealthServer(
        watchdog=mock_watchdog,
        slack_runner=mock_slack_runner,
        store=mock_store,
        port=0,  # Use any available port
    )


class TestHealthServerLiveness:
    """Tests for liveness check."""

    async def test_alive(self, server: HealthServer) -> None:
        """Test that liveness returns alive normally."""
        result = await server.check_liveness()

        assert result["status"] == "alive"
        assert "timestamp" in result

    async def test_shutting_down(
        self, server: HealthServer, mock_watchdog: Mock
    ) -> None:
        """Test that self-heal in progress is reported."""
        mock_watchdog.shutting_down = True

        result = await server.check_liveness()

        assert result["status"] == "shutting_down"


class TestHealthServerReadiness:
    """Tests for readiness check."""

    async def test_ready(self, server: HealthServer) -> None:
        """Test readiness when every component is healthy."""
        result = await server.check_readiness()

        assert result == {
            "ready": True,
            "watchdog": "connected",
            "reconnect_attempts": 0,
            "slack": True,
            "store": True,
        }

    async def test_not_ready_when_disconnected(
        self, server: HealthServer, mock_watchdog: Mock, mock_slack_runner: Mock
    ) -> None:
        """Test readiness while the gateway is down."""
        mock_watchdog.state = WatchdogState.DISCONNECTED
        mock_watchdog.reconnect_attempts = 2
        mock_slack_runner.is_connected.return_value = False

        result = await server.check_readiness()

        assert result["ready"] is False
        assert result["watchdog"] == "disconnected"
        assert result["reconnect_attempts"] == 2

    async def test_not_ready_when_store_unhealthy(
        self, server: HealthServer, mock_store: Mock
    ) -> None:
        """Test readiness with a failing store."""
        mock_store.is_healthy.return_value = False

        result = await server.check_readiness()

        assert result["ready"] is False
        assert result["store"] is False


class TestHealthServerHTTP:
    """Tests for HTTP endpoints."""

    async def test_endpoints(
        self, server: HealthServer, mock_store: Mock
    ) -> None:
        """Test /live and /ready over HTTP."""
        await server.start()
        try:
            assert server.is_running is True
            base = f"http://127.0.0.1:{server.port}"
            async with aiohttp.ClientSession() as session:
                async with session.get(f"{base}/live") as response:
                    assert response.status == 200
                    assert (await response.json())["status"] == "alive"

                async with session.get(f"{base}/ready") as response:
                    assert response.status == 200

                mock_store.is_healthy.return_value = False
                async with session.get(f"{base}/ready") as response:
                    assert response.status == 503
                    assert (await response.json())["ready"] is False
        finally:
            await server.stop()

        assert server.is_running is False
