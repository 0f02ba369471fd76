"""Tests for SlackEventAdapter."""

import pytest

from slackollama.domain.entities import MessageReference
from slackollama.infrastructure.slack import SlackEventAdapter


@pytest.fixture
def adapter() -> SlackEventAdapter:
    """Create SlackEventAdapter instance."""
    return SlackEventAdapter()


class TestToMessage:
    """to_message() tests."""

    def test_channel_message(self, adapter: SlackEventAdapter) -> None:
        """Test converting a plain channel message."""
        message = adapter.to_message(
            {
                "type": "message",
                "channel": "C123",
                "user": "U123",
                "text": "<@B001> hello",
                "ts": "1700000000.000100",
            }
        )

        assert message.id == "1700000000.000100"
        assert message.channel_id == "C123"
        assert message.user_id == "U123"
        assert message.text == "<@B001> hello"
        assert message.thread_ts is None
        assert message.is_bot is False
        assert message.reference is None

    def test_thread_message(self, adapter: SlackEventAdapter) -> None:
        """Test converting a thread reply."""
        message = adapter.to_message(
            {
                "channel": "C123",
                "user": "U123",
                "text": "hi",
                "ts": "2.0",
                "thread_ts": "1.0",
            }
        )

        assert message.thread_ts == "1.0"

    @pytest.mark.parametrize(
        "extra",
        [{"bot_id": "BX"}, {"subtype": "bot_message"}],
    )
    def test_bot_message(self, adapter: SlackEventAdapter, extra: dict) -> None:
        """Test that bot messages are flagged."""
        message = adapter.to_message(
            {"channel": "C123", "text": "beep", "ts": "1.0", **extra}
        )

        assert message.is_bot is True

    def test_message_with_permalink(self, adapter: SlackEventAdapter) -> None:
        """Test that a permalink becomes the reference."""
        message = adapter.to_message(
            {
                "channel": "C123",
                "user": "U123",
                "text": "<@B001> explain "
                "<https://acme.slack.com/archives/C999/p1700000000123456>",
                "ts": "2.0",
            }
        )

        assert message.reference == MessageReference(
            channel_id="C999", message_id="1700000000.123456"
        )


class TestExtractReference:
    """extract_reference() tests."""

    def test_no_link(self, adapter: SlackEventAdapter) -> None:
        """Test text without a permalink."""
        assert adapter.extract_reference("just text") is None

    def test_thread_reply_link(self, adapter: SlackEventAdapter) -> None:
        """Test a permalink to a reply inside a thread."""
        reference = adapter.extract_reference(
            "https://acme.slack.com/archives/C999/p1700000000123456"
            "?thread_ts=1699999999.000001&amp;cid=C999"
        )

        assert reference == MessageReference(
            channel_id="C999",
            message_id="1700000000.123456",
            thread_ts="1699999999.000001",
        )

    def test_labelled_link(self, adapter: SlackEventAdapter) -> None:
        """Test a link with a display label."""
        reference = adapter.extract_reference(
            "<https://acme.slack.com/archives/C999/p1700000000123456|this message>"
        )

        assert reference is not None
        assert reference.message_id == "1700000000.123456"

    def test_first_link_wins(self, adapter: SlackEventAdapter) -> None:
        """Test that only the first permalink is used."""
        reference = adapter.extract_reference(
            "https://a.slack.com/archives/C1/p1000000000000001 "
            "https://a.slack.com/archives/C2/p2000000000000002"
        )

        assert reference is not None
        assert reference.channel_id == "C1"
