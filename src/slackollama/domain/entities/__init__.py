"""Domain entities."""

from slackollama.domain.entities.channel import ChannelHandle, MessageHandle
from slackollama.domain.entities.context import ConversationContext
from slackollama.domain.entities.generation import GenerationChunk
from slackollama.domain.entities.message import Message, MessageReference
from slackollama.domain.entities.reply import (
    NoneOpen,
    Open,
    OpenMessage,
    RenderedMessage,
    RenderedReply,
)

__all__ = [
    "ChannelHandle",
    "ConversationContext",
    "GenerationChunk",
    "Message",
    "MessageHandle",
    "MessageReference",
    "NoneOpen",
    "Open",
    "OpenMessage",
    "RenderedMessage",
    "RenderedReply",
]
