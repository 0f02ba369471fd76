"""Tests for ReplyToMentionUseCase."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, Mock

import pytest

from slackollama.application.use_cases import ReplyToMentionUseCase
from slackollama.config import ResponseConfig
from slackollama.domain.entities import (
    ChannelHandle,
    ConversationContext,
    GenerationChunk,
    Message,
    MessageHandle,
    MessageReference,
)


async def _stream(chunks: list[GenerationChunk]) -> AsyncIterator[GenerationChunk]:
    for chunk in chunks:
        yield chunk


async def _failing_stream(
    chunks: list[GenerationChunk],
) -> AsyncIterator[GenerationChunk]:
    for chunk in chunks:
        yield chunk
    raise RuntimeError("model crashed")


CONTEXT = ConversationContext.from_value([1, 2, 3])


@pytest.fixture
def bot_user_id() -> str:
    """Bot's user ID."""
    return "B001"


@pytest.fixture
def mock_chat_sink() -> Mock:
    """Create mock chat sink."""
    sink = Mock()
    sink.send = AsyncMock(return_value=MessageHandle("C123", "2.0"))
    sink.edit = AsyncMock()
    sink.create_thread = AsyncMock(return_value=ChannelHandle("C123", "1.0"))
    return sink


@pytest.fixture
def mock_message_fetcher() -> Mock:
    """Create mock message fetcher."""
    fetcher = Mock()
    fetcher.fetch_text = AsyncMock(return_value="referenced text")
    return fetcher


@pytest.fixture
def chunks() -> list[GenerationChunk]:
    """Chunks produced by the generation stream."""
    return [
        GenerationChunk("Hel"),
        GenerationChunk("lo"),
        GenerationChunk(" world"),
        GenerationChunk("", done=True, context=CONTEXT),
    ]


@pytest.fixture
def mock_generation_stream(chunks: list[GenerationChunk]) -> Mock:
    """Create mock generation stream."""
    stream = Mock()
    stream.generate = Mock(side_effect=lambda prompt, context: _stream(chunks))
    return stream


@pytest.fixture
def mock_context_store() -> Mock:
    """Create mock context store."""
    store = Mock()
    store.load = AsyncMock(return_value=None)
    store.save = AsyncMock()
    return store


@pytest.fixture
def mock_thread_tracker() -> Mock:
    """Create mock thread tracker."""
    tracker = Mock()
    tracker.touch_thread = AsyncMock()
    return tracker


@pytest.fixture
def mock_liveness() -> Mock:
    """Create mock liveness sink."""
    return Mock()


@pytest.fixture
def mock_prompt_builder() -> Mock:
    """Create mock prompt builder."""
    builder = Mock()
    builder.build_grounded = Mock(return_value="grounded prompt")
    return builder


@pytest.fixture
def use_case(
    mock_chat_sink: Mock,
    mock_message_fetcher: Mock,
    mock_generation_stream: Mock,
    mock_context_store: Mock,
    mock_thread_tracker: Mock,
    mock_liveness: Mock,
    mock_prompt_builder: Mock,
    bot_user_id: str,
) -> ReplyToMentionUseCase:
    """Create use case instance with a frozen clock."""
    return ReplyToMentionUseCase(
        chat_sink=mock_chat_sink,
        message_fetcher=mock_message_fetcher,
        generation_stream=mock_generation_stream,
        context_store=mock_context_store,
        thread_tracker=mock_thread_tracker,
        liveness=mock_liveness,
        prompt_builder=mock_prompt_builder,
        config=ResponseConfig(),
        bot_user_id=bot_user_id,
        clock=lambda: 0.0,
    )


def _message(
    text: str,
    *,
    thread_ts: str | None = None,
    reference: MessageReference | None = None,
    is_bot: bool = False,
) -> Message:
    return Message(
        id="1.0",
        channel_id="C123",
        user_id="U123",
        text=text,
        thread_ts=thread_ts,
        is_bot=is_bot,
        reference=reference,
    )


class TestReplyToMentionFiltering:
    """Message filtering tests."""

    async def test_ignores_bot_messages(
        self, use_case: ReplyToMentionUseCase, mock_generation_stream: Mock
    ) -> None:
        """Test that bot messages are ignored."""
        await use_case.execute(_message("<@B001> hi", is_bot=True))

        mock_generation_stream.generate.assert_not_called()

    async def test_ignores_messages_without_mention(
        self, use_case: ReplyToMentionUseCase, mock_generation_stream: Mock
    ) -> None:
        """Test that messages not mentioning the bot are ignored."""
        await use_case.execute(_message("hello everyone"))

        mock_generation_stream.generate.assert_not_called()

    async def test_touches_liveness(
        self, use_case: ReplyToMentionUseCase, mock_liveness: Mock
    ) -> None:
        """Test that handling a mention counts as traffic."""
        await use_case.execute(_message("<@B001> hi"))

        mock_liveness.touch.assert_called_once()


class TestReplyToMentionPrompt:
    """Prompt and context resolution tests."""

    async def test_strips_mention(
        self, use_case: ReplyToMentionUseCase, mock_generation_stream: Mock
    ) -> None:
        """Test that the mention token is removed from the prompt."""
        await use_case.execute(_message("<@B001> what is up?"))

        mock_generation_stream.generate.assert_called_once_with("what is up?", None)

    async def test_bare_mention_uses_greeting(
        self, use_case: ReplyToMentionUseCase, mock_generation_stream: Mock
    ) -> None:
        """Test that a mention without text becomes a greeting."""
        await use_case.execute(_message("<@B001|bot>  "))

        mock_generation_stream.generate.assert_called_once_with("Hi!", None)

    async def test_continues_channel_context(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
    ) -> None:
        """Test that the channel's latest context is used without a reference."""
        mock_context_store.load.return_value = CONTEXT

        await use_case.execute(_message("<@B001> more", thread_ts="0.5"))

        mock_context_store.load.assert_awaited_once_with(channel_id="C123:0.5")
        mock_generation_stream.generate.assert_called_once_with("more", CONTEXT)

    async def test_reference_with_stored_context(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
        mock_message_fetcher: Mock,
    ) -> None:
        """Test that a reply to a known message continues its context."""
        mock_context_store.load.return_value = CONTEXT
        reference = MessageReference(channel_id="C123", message_id="0.9")

        await use_case.execute(_message("<@B001> why?", reference=reference))

        mock_context_store.load.assert_awaited_once_with(message_id="C123:0.9")
        mock_message_fetcher.fetch_text.assert_not_awaited()
        mock_generation_stream.generate.assert_called_once_with("why?", CONTEXT)

    async def test_reference_without_context_is_grounded(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
        mock_message_fetcher: Mock,
        mock_prompt_builder: Mock,
    ) -> None:
        """Test that an unknown referenced message is quoted into the prompt."""
        reference = MessageReference(channel_id="C123", message_id="0.9")

        await use_case.execute(_message("<@B001> summarize", reference=reference))

        mock_message_fetcher.fetch_text.assert_awaited_once_with(reference)
        mock_prompt_builder.build_grounded.assert_called_once_with(
            "summarize", "referenced text"
        )
        assert mock_context_store.load.await_args_list[-1].kwargs == {
            "channel_id": "C123"
        }
        mock_generation_stream.generate.assert_called_once_with(
            "grounded prompt", None
        )

    async def test_reference_fetch_failure_falls_back(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_message_fetcher: Mock,
        mock_prompt_builder: Mock,
    ) -> None:
        """Test that an unreadable referenced message is ignored."""
        mock_message_fetcher.fetch_text.side_effect = RuntimeError("no access")
        reference = MessageReference(channel_id="C999", message_id="0.9")

        await use_case.execute(_message("<@B001> summarize", reference=reference))

        mock_prompt_builder.build_grounded.assert_not_called()
        mock_generation_stream.generate.assert_called_once_with("summarize", None)


class TestReplyToMentionRendering:
    """Streaming and persistence tests."""

    async def test_streams_into_new_thread(
        self, use_case: ReplyToMentionUseCase, mock_chat_sink: Mock
    ) -> None:
        """Test the message sequence for a plain channel mention."""
        await use_case.execute(_message("<@B001> hi"))

        mock_chat_sink.create_thread.assert_awaited_once()
        mock_chat_sink.send.assert_awaited_once_with(
            ChannelHandle("C123", "1.0"), "Hel..."
        )
        mock_chat_sink.edit.assert_awaited_once_with(
            MessageHandle("C123", "2.0"), "Hello world"
        )

    async def test_saves_context_under_reply_channel(
        self,
        use_case: ReplyToMentionUseCase,
        mock_context_store: Mock,
        mock_thread_tracker: Mock,
    ) -> None:
        """Test that the context is saved for the thread the reply went to."""
        await use_case.execute(_message("<@B001> hi"))

        mock_context_store.save.assert_awaited_once_with(
            "C123:1.0", "C123:1.0", CONTEXT
        )
        mock_thread_tracker.touch_thread.assert_awaited_once_with(
            ChannelHandle("C123", "1.0")
        )

    async def test_missing_context_is_not_saved(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
    ) -> None:
        """Test that a stream without context leaves the store untouched."""
        mock_generation_stream.generate.side_effect = lambda prompt, context: _stream(
            [GenerationChunk("Hi"), GenerationChunk("", done=True)]
        )

        await use_case.execute(_message("<@B001> hi"))

        mock_context_store.save.assert_not_awaited()

    async def test_stream_failure_saves_nothing(
        self,
        use_case: ReplyToMentionUseCase,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
        mock_chat_sink: Mock,
    ) -> None:
        """Test that a broken stream propagates and stores no context."""
        mock_generation_stream.generate.side_effect = (
            lambda prompt, context: _failing_stream([GenerationChunk("partial")])
        )

        with pytest.raises(RuntimeError, match="model crashed"):
            await use_case.execute(_message("<@B001> hi"))

        mock_chat_sink.send.assert_awaited_once()
        mock_context_store.save.assert_not_awaited()

    async def test_thread_tracking_failure_is_logged(
        self,
        use_case: ReplyToMentionUseCase,
        mock_thread_tracker: Mock,
        mock_context_store: Mock,
    ) -> None:
        """Test that a failed activity update does not fail the reply."""
        mock_thread_tracker.touch_thread.side_effect = RuntimeError("store down")

        await use_case.execute(_message("<@B001> hi"))

        mock_context_store.save.assert_awaited_once()


class TestThrottle:
    """Edit throttling tests."""

    async def test_coalesces_until_interval(
        self,
        mock_chat_sink: Mock,
        mock_message_fetcher: Mock,
        mock_generation_stream: Mock,
        mock_context_store: Mock,
        mock_thread_tracker: Mock,
        mock_liveness: Mock,
        mock_prompt_builder: Mock,
    ) -> None:
        """Test that chunks are merged within the flush interval."""
        times = iter([0.0, 0.0, 0.1, 0.2, 0.5, 0.6])
        use_case = ReplyToMentionUseCase(
            chat_sink=mock_chat_sink,
            message_fetcher=mock_message_fetcher,
            generation_stream=mock_generation_stream,
            context_store=mock_context_store,
            thread_tracker=mock_thread_tracker,
            liveness=mock_liveness,
            prompt_builder=mock_prompt_builder,
            config=ResponseConfig(flush_interval_seconds=0.3),
            bot_user_id="B001",
            clock=lambda: next(times),
        )
        chunks = [
            GenerationChunk("a"),
            GenerationChunk("b"),
            GenerationChunk("c"),
            GenerationChunk("d"),
            GenerationChunk("e", done=True, context=CONTEXT),
        ]

        result = [chunk async for chunk in use_case._throttle(_stream(chunks))]

        assert [(c.response, c.done) for c in result] == [
            ("a", False),
            ("bcd", False),
            ("e", True),
        ]
        assert result[-1].context == CONTEXT
