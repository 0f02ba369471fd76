"""Slack integration."""

from slackollama.infrastructure.slack.client import SlackAppRunner, create_slack_app
from slackollama.infrastructure.slack.event_adapter import SlackEventAdapter
from slackollama.infrastructure.slack.history import SlackMessageFetcher
from slackollama.infrastructure.slack.liveness import SocketModeLivenessMonitor
from slackollama.infrastructure.slack.messaging import SlackChatSink

__all__ = [
    "SlackAppRunner",
    "SlackChatSink",
    "SlackEventAdapter",
    "SlackMessageFetcher",
    "SocketModeLivenessMonitor",
    "create_slack_app",
]
