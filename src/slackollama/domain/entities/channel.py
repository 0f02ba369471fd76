"""Channel and message handles."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChannelHandle:
    """Where messages are posted.

    A handle without ``thread_ts`` is a plain channel; with ``thread_ts`` it
    is a thread anchored at the message whose ``ts`` equals ``thread_ts``.

    Attributes:
        channel_id: Platform-specific channel ID.
        thread_ts: Anchor message timestamp when this is a thread.
    """

    channel_id: str
    thread_ts: str | None = None

    @property
    def is_thread(self) -> bool:
        """Check if this handle points into a thread."""
        return self.thread_ts is not None

    @property
    def key(self) -> str:
        """Conversation scope key (channel ID, or channel:thread for threads)."""
        if self.thread_ts is None:
            return self.channel_id
        return f"{self.channel_id}:{self.thread_ts}"


@dataclass(frozen=True)
class MessageHandle:
    """A message the bot has sent and may still edit.

    Attributes:
        channel_id: Channel the message lives in.
        ts: Message timestamp (Slack message ID).
    """

    channel_id: str
    ts: str
