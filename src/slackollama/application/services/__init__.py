"""Application services."""

from slackollama.application.services.connection_watchdog import (
    ConnectionWatchdog,
    WatchdogState,
)
from slackollama.application.services.context_store import ContextStore, StoreResult
from slackollama.application.services.periodic_task import PeriodicTask
from slackollama.application.services.thread_activity import ThreadActivityTracker

__all__ = [
    "ConnectionWatchdog",
    "ContextStore",
    "PeriodicTask",
    "StoreResult",
    "ThreadActivityTracker",
    "WatchdogState",
]
