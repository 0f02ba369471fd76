"""Slack event adapter."""

import re
from typing import Any

from slackollama.domain.entities import Message, MessageReference


class SlackEventAdapter:
    """Convert Slack events to domain entities.

    This adapter translates Slack-specific event payloads into
    platform-independent domain entities. A message permalink in the
    text is treated as the message being replied to.
    """

    PERMALINK_PATTERN = re.compile(
        r"https://[^/\s|>]+/archives/(?P<channel>[A-Z0-9]+)/p(?P<ts>\d{7,})"
        r"(?:\?(?P<query>[^\s|>]*))?"
    )
    THREAD_TS_PATTERN = re.compile(r"(?:^|&)thread_ts=(?P<thread_ts>\d+\.\d+)")

    def to_message(self, event: dict[str, Any]) -> Message:
        """Convert a Slack message event to a Message entity.

        Args:
            event: Slack message event payload.

        Returns:
            Message entity.
        """
        text = event.get("text", "")
        return Message(
            id=event["ts"],
            channel_id=event["channel"],
            user_id=event.get("user") or event.get("bot_id") or "",
            text=text,
            thread_ts=event.get("thread_ts"),
            is_bot=bool(event.get("bot_id")) or event.get("subtype") == "bot_message",
            reference=self.extract_reference(text),
        )

    def extract_reference(self, text: str) -> MessageReference | None:
        """Extract the first message permalink from message text.

        Args:
            text: Message text.

        Returns:
            Reference to the linked message, or None.
        """
        match = self.PERMALINK_PATTERN.search(text)
        if match is None:
            return None

        digits = match.group("ts")
        message_id = f"{digits[:-6]}.{digits[-6:]}"

        thread_ts = None
        query = match.group("query")
        if query:
            thread_match = self.THREAD_TS_PATTERN.search(query.replace("&amp;", "&"))
            if thread_match is not None:
                thread_ts = thread_match.group("thread_ts")

        return MessageReference(
            channel_id=match.group("channel"),
            message_id=message_id,
            thread_ts=thread_ts,
        )
