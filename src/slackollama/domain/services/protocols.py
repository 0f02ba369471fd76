"""Domain service protocols."""

from collections.abc import AsyncIterator
from typing import Protocol

from slackollama.domain.entities import (
    ChannelHandle,
    ConversationContext,
    GenerationChunk,
    Message,
    MessageHandle,
    MessageReference,
)


class ChatSink(Protocol):
    """Outbound chat abstraction (platform-independent).

    All operations may fail; failures propagate to the caller.
    """

    async def send(self, channel: ChannelHandle, text: str) -> MessageHandle:
        """Post a new message.

        Args:
            channel: Channel or thread to post into.
            text: Message content.

        Returns:
            Handle of the sent message.
        """
        ...

    async def edit(self, message: MessageHandle, text: str) -> None:
        """Replace the content of a previously sent message.

        Args:
            message: Message to edit.
            text: New content.
        """
        ...

    async def create_thread(self, origin: Message, title: str) -> ChannelHandle:
        """Open a thread anchored at a message.

        Args:
            origin: Message the thread hangs off.
            title: Thread title, where the platform supports one.

        Returns:
            Handle of the thread.
        """
        ...

    async def archive_thread(self, thread: ChannelHandle) -> None:
        """Mark a thread as idle/archived.

        Args:
            thread: Thread handle.
        """
        ...


class MessageFetcher(Protocol):
    """Looks up the text of an existing message."""

    async def fetch_text(self, reference: MessageReference) -> str | None:
        """Fetch a message's text.

        Args:
            reference: Message to fetch.

        Returns:
            The message text, or None if it does not exist.
        """
        ...


class GenerationStream(Protocol):
    """Streaming text generation abstraction.

    Each call starts a new stream; streams cannot be resumed.
    """

    def generate(
        self,
        prompt: str,
        context: ConversationContext | None = None,
    ) -> AsyncIterator[GenerationChunk]:
        """Stream a generation.

        Args:
            prompt: User prompt.
            context: Continuation context from a previous turn.

        Returns:
            Async iterator of chunks; the last one has ``done=True``.
        """
        ...


class LivenessSink(Protocol):
    """Receives gateway liveness signals."""

    def touch(self) -> None:
        """Record inbound traffic."""
        ...


class PromptBuilder(Protocol):
    """Builds prompts sent to the inference service."""

    def build_grounded(self, content: str, reference_text: str) -> str:
        """Combine a question with the text of the message it replies to.

        Args:
            content: User's question.
            reference_text: Text of the referenced message.

        Returns:
            Prompt text.
        """
        ...
