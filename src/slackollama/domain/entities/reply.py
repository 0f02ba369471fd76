"""Rendered reply entities."""

from dataclasses import dataclass, field

from slackollama.domain.entities.channel import MessageHandle


@dataclass(frozen=True)
class NoneOpen:
    """No message is open; the next flush sends a new one."""


@dataclass(frozen=True)
class Open:
    """A message is open and receives further edits.

    Attributes:
        handle: The open message.
        displayed: Text currently shown in the message (may include a suffix).
    """

    handle: MessageHandle
    displayed: str


OpenMessage = NoneOpen | Open


@dataclass
class RenderedMessage:
    """One chat message belonging to a reply.

    Attributes:
        handle: Sent message handle.
        text: Message content without any continuation suffix.
        sealed: Whether the message will receive no further edits.
    """

    handle: MessageHandle
    text: str
    sealed: bool = False


@dataclass
class RenderedReply:
    """Ordered messages produced for a single generation turn."""

    messages: list[RenderedMessage] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated content of all messages, in order."""
        return "".join(message.text for message in self.messages)

    @property
    def open_message(self) -> RenderedMessage | None:
        """The message still open for edits, if any."""
        if self.messages and not self.messages[-1].sealed:
            return self.messages[-1]
        return None
