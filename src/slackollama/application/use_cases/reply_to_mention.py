"""Reply to mention use case."""

import logging
import re
import time
from collections.abc import AsyncIterator, Callable

from slackollama.application.services.context_store import ContextStore
from slackollama.application.services.thread_activity import ThreadActivityTracker
from slackollama.config import ResponseConfig
from slackollama.domain.entities import (
    ConversationContext,
    GenerationChunk,
    Message,
    MessageReference,
)
from slackollama.domain.services import (
    ChatSink,
    GenerationStream,
    LivenessSink,
    MessageFetcher,
    PromptBuilder,
    ResponseRenderer,
)

logger = logging.getLogger(__name__)


class ReplyToMentionUseCase:
    """Use case for replying to messages that mention the bot.

    Resolves the conversation to continue, streams a generation into the
    chat through a ResponseRenderer and stores the returned context so the
    next mention can pick up where this one left off.
    """

    def __init__(
        self,
        chat_sink: ChatSink,
        message_fetcher: MessageFetcher,
        generation_stream: GenerationStream,
        context_store: ContextStore,
        thread_tracker: ThreadActivityTracker,
        liveness: LivenessSink,
        prompt_builder: PromptBuilder,
        config: ResponseConfig,
        bot_user_id: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the use case.

        Args:
            chat_sink: Sink for sending and editing messages.
            message_fetcher: Looks up referenced messages.
            generation_stream: Inference stream supplier.
            context_store: Store for continuation contexts.
            thread_tracker: Tracks thread activity for the idle sweep.
            liveness: Receives a liveness signal per handled mention.
            prompt_builder: Builds grounded prompts.
            config: Response rendering configuration.
            bot_user_id: The bot's user ID.
            clock: Monotonic clock used to throttle message edits.
        """
        self._chat_sink = chat_sink
        self._message_fetcher = message_fetcher
        self._generation_stream = generation_stream
        self._context_store = context_store
        self._thread_tracker = thread_tracker
        self._liveness = liveness
        self._prompt_builder = prompt_builder
        self._config = config
        self._bot_user_id = bot_user_id
        self._clock = clock
        self._mention_pattern = re.compile(
            rf"<@{re.escape(bot_user_id)}(?:\|[^>]*)?>"
        )

    async def execute(self, message: Message) -> None:
        """Execute the use case.

        Processing flow:
        1. Ignore bot messages and messages that don't mention the bot
        2. Refresh liveness
        3. Build the prompt and resolve the context to continue
        4. Stream the generation into the chat
        5. Save the returned context and mark the thread active

        Args:
            message: The received message.
        """
        if message.is_bot or message.user_id == self._bot_user_id:
            return

        if not message.mentions_user(self._bot_user_id):
            return

        self._liveness.touch()

        content = self.strip_mention(message.text) or self._config.greeting
        context: ConversationContext | None = None

        if message.reference is not None:
            context = await self._context_store.load(
                message_id=message.reference.qualified_id
            )
            if context is None:
                reference_text = await self._fetch_reference_text(message.reference)
                if reference_text:
                    content = self._prompt_builder.build_grounded(
                        content, reference_text
                    )

        if context is None:
            context = await self._context_store.load(channel_id=message.channel.key)

        logger.info(
            "Replying to %s in %s (context=%s)",
            message.id,
            message.channel.key,
            "yes" if context is not None else "no",
        )

        renderer = ResponseRenderer(
            self._chat_sink,
            message,
            max_length=self._config.max_message_length,
            thread_title=self._config.thread_title,
        )

        last: GenerationChunk | None = None
        chunks = self._generation_stream.generate(content, context)
        async for chunk in self._throttle(chunks):
            suffix = "" if chunk.done else self._config.continuation_marker
            await renderer.write(chunk.response, suffix)
            last = chunk

        await renderer.write("", "")

        if last is not None and last.context is not None:
            await self._context_store.save(
                renderer.channel.key, message.qualified_id, last.context
            )
        else:
            logger.info("No context returned for %s; not saving", message.id)

        if renderer.channel.is_thread:
            try:
                await self._thread_tracker.touch_thread(renderer.channel)
            except Exception as e:
                logger.warning(
                    "Failed to mark thread %s active: %s", renderer.channel.key, e
                )

    def strip_mention(self, text: str) -> str:
        """Remove the bot's mention tokens from a message.

        Args:
            text: Message text.

        Returns:
            Remaining text, stripped of surrounding whitespace.
        """
        return self._mention_pattern.sub("", text).strip()

    async def _fetch_reference_text(self, reference: MessageReference) -> str | None:
        """Fetch the referenced message, treating failures as absent."""
        try:
            return await self._message_fetcher.fetch_text(reference)
        except Exception as e:
            logger.warning(
                "Failed to fetch referenced message %s: %s", reference.message_id, e
            )
            return None

    async def _throttle(
        self, chunks: AsyncIterator[GenerationChunk]
    ) -> AsyncIterator[GenerationChunk]:
        """Coalesce chunks so the chat is edited at a bounded rate.

        The first chunk passes through immediately. Later chunks are merged
        until the flush interval has elapsed or the stream is done.
        """
        buffer = ""
        first = True
        last_flush = self._clock()

        async for chunk in chunks:
            buffer += chunk.response
            now = self._clock()
            if (
                first
                or chunk.done
                or now - last_flush > self._config.flush_interval_seconds
            ):
                first = False
                yield GenerationChunk(
                    response=buffer, done=chunk.done, context=chunk.context
                )
                buffer = ""
                last_flush = now

        if buffer:
            yield GenerationChunk(response=buffer)
