"""Generation stream chunk entity."""

from dataclasses import dataclass

from slackollama.domain.entities.context import ConversationContext


@dataclass(frozen=True)
class GenerationChunk:
    """One element of a streamed generation.

    Attributes:
        response: Partial text produced since the previous chunk.
        done: True on the last chunk of the stream.
        context: Continuation context, usually present only when done.
    """

    response: str
    done: bool = False
    context: ConversationContext | None = None
