"""Streaming response renderer."""

import logging

from slackollama.domain.entities import (
    ChannelHandle,
    Message,
    NoneOpen,
    Open,
    OpenMessage,
    RenderedMessage,
    RenderedReply,
)
from slackollama.domain.services.protocols import ChatSink

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGE_LENGTH = 2000
DEFAULT_THREAD_TITLE = "Ollama Says"


class ResponseRenderer:
    """Turns streamed text increments into a bounded series of chat messages.

    The renderer keeps one message open at a time and edits it as text
    arrives. When the next increment would push the open message past
    ``max_length`` the message is sealed and a new one is started. A suffix
    (such as an ellipsis) is only ever shown on the open message; sealed
    messages contain exactly their share of the generated text.

    The renderer decides what to send, never when. Callers throttle writes.
    Chat sink failures propagate unchanged.
    """

    def __init__(
        self,
        sink: ChatSink,
        origin: Message,
        *,
        max_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
        thread_title: str = DEFAULT_THREAD_TITLE,
    ) -> None:
        """Initialize the renderer.

        Args:
            sink: Chat sink used to send and edit messages.
            origin: Message being replied to.
            max_length: Hard per-message size limit.
            thread_title: Title for the thread opened from a plain channel.
        """
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self._sink = sink
        self._origin = origin
        self._channel = origin.channel
        self._max_length = max_length
        self._thread_title = thread_title
        self._buffer = ""
        self._state: OpenMessage = NoneOpen()
        self._reply = RenderedReply()

    @property
    def channel(self) -> ChannelHandle:
        """Channel or thread the reply is rendered into."""
        return self._channel

    @property
    def reply(self) -> RenderedReply:
        """Messages rendered so far."""
        return self._reply

    @property
    def state(self) -> OpenMessage:
        """Current open-message state."""
        return self._state

    async def write(self, increment: str, suffix: str = "") -> None:
        """Append an increment and flush it to the open message.

        A call with an empty increment and no suffix is the final flush: the
        open message is rendered without a suffix and sealed.

        Args:
            increment: Newly generated text.
            suffix: Continuation marker shown after the text while it is open.
        """
        if len(suffix) >= self._max_length:
            suffix = ""

        if len(self._buffer) + len(increment) + len(suffix) > self._max_length:
            await self._overflow(increment, suffix)
        else:
            self._buffer += increment

        await self._flush(suffix)

        if not increment and not suffix:
            await self._seal()

    async def _overflow(self, increment: str, suffix: str) -> None:
        """Seal the open message and start a new buffer with the increment."""
        if isinstance(self._state, Open):
            await self._seal()
            pending = increment
        else:
            # Nothing was sent yet, so the blank buffer carries over
            pending = self._buffer + increment
        self._buffer = ""

        while len(pending) + len(suffix) > self._max_length:
            if not pending.strip():
                break
            if not pending[: self._max_length].strip():
                # A whitespace run longer than one message can't be posted
                leading = len(pending) - len(pending.lstrip())
                dropped = leading - (self._max_length - 1)
                logger.warning("Dropping %d whitespace characters", dropped)
                pending = pending[dropped:]
                continue
            cut = self._split_point(pending)
            self._buffer = pending[:cut]
            pending = pending[cut:]
            await self._flush("")
            await self._seal()

        self._buffer = pending

    def _split_point(self, text: str) -> int:
        """Find where to cut an oversize text.

        Whitespace-only messages are rejected by the chat, so the cut moves
        left until the text after it no longer starts with a blank message.
        """
        cut = self._max_length
        while (
            cut > 1
            and text[cut:].strip()
            and not text[cut : cut + self._max_length].strip()
            and text[: cut - 1].strip()
        ):
            cut -= 1
        return cut

    async def _flush(self, suffix: str) -> None:
        """Show the buffer (plus suffix) in the open message."""
        if not self._buffer.strip():
            return

        text = self._buffer + suffix

        if isinstance(self._state, Open):
            if text != self._state.displayed:
                await self._sink.edit(self._state.handle, text)
                self._state = Open(handle=self._state.handle, displayed=text)
            self._reply.messages[-1].text = self._buffer
            return

        if not self._channel.is_thread:
            self._channel = await self._sink.create_thread(
                self._origin, self._thread_title
            )
            logger.debug("Opened thread %s", self._channel.key)

        handle = await self._sink.send(self._channel, text)
        self._state = Open(handle=handle, displayed=text)
        self._reply.messages.append(RenderedMessage(handle=handle, text=self._buffer))

    async def _seal(self) -> None:
        """Close the open message to further edits."""
        if isinstance(self._state, Open):
            if self._state.displayed != self._buffer:
                await self._sink.edit(self._state.handle, self._buffer)
            message = self._reply.messages[-1]
            message.text = self._buffer
            message.sealed = True
            logger.debug(
                "Sealed message %s (%d chars)", self._state.handle.ts, len(self._buffer)
            )
        self._state = NoneOpen()
        self._buffer = ""
