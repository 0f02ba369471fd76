"""Message entity."""

from dataclasses import dataclass

from slackollama.domain.entities.channel import ChannelHandle


@dataclass(frozen=True)
class MessageReference:
    """Reference to another message that a message replies to.

    Attributes:
        channel_id: Channel of the referenced message.
        message_id: Timestamp of the referenced message.
        thread_ts: Thread the referenced message lives in, if any.
    """

    channel_id: str
    message_id: str
    thread_ts: str | None = None

    @property
    def qualified_id(self) -> str:
        """Channel-qualified ID of the referenced message."""
        return f"{self.channel_id}:{self.message_id}"


@dataclass(frozen=True)
class Message:
    """Inbound message entity.

    Attributes:
        id: Platform-specific message ID.
        channel_id: Channel where the message was posted.
        user_id: User who sent the message.
        text: Message content.
        thread_ts: Parent message timestamp (if in a thread).
        is_bot: Whether the sender is a bot.
        reference: Message this one replies to, if any.
    """

    id: str
    channel_id: str
    user_id: str
    text: str
    thread_ts: str | None = None
    is_bot: bool = False
    reference: MessageReference | None = None

    @property
    def channel(self) -> ChannelHandle:
        """Handle of the channel or thread the message was posted in."""
        return ChannelHandle(channel_id=self.channel_id, thread_ts=self.thread_ts)

    @property
    def qualified_id(self) -> str:
        """Message ID qualified by its channel.

        Timestamps are only unique within one channel.
        """
        return f"{self.channel_id}:{self.id}"

    def mentions_user(self, user_id: str) -> bool:
        """Check if a user is mentioned in this message.

        Args:
            user_id: The user ID to check.

        Returns:
            True if the user is mentioned.
        """
        return f"<@{user_id}>" in self.text or f"<@{user_id}|" in self.text
