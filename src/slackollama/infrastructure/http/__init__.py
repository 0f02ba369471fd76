"""HTTP infrastructure."""

from slackollama.infrastructure.http.health_server import HealthServer

__all__ = ["HealthServer"]
