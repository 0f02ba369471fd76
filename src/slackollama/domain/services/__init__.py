"""Domain services."""

from slackollama.domain.services.protocols import (
    ChatSink,
    GenerationStream,
    LivenessSink,
    MessageFetcher,
    PromptBuilder,
)
from slackollama.domain.services.response_renderer import ResponseRenderer

__all__ = [
    "ChatSink",
    "GenerationStream",
    "LivenessSink",
    "MessageFetcher",
    "PromptBuilder",
    "ResponseRenderer",
]
