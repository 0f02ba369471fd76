"""Slack chat sink."""

import logging

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from slackollama.domain.entities import ChannelHandle, Message, MessageHandle
from slackollama.domain.exceptions import ChannelNotAccessibleError

logger = logging.getLogger(__name__)

# Error codes that indicate the channel is not accessible
_CHANNEL_NOT_ACCESSIBLE_ERRORS = frozenset(
    {
        "not_in_channel",
        "channel_not_found",
        "is_archived",
    }
)


def _error_code(error: SlackApiError) -> str:
    response = error.response
    try:
        return response.get("error", "") or ""
    except AttributeError:
        return ""


class SlackChatSink:
    """Slack implementation of ChatSink.

    Threads need no API call on Slack: a thread exists as soon as a
    message is posted with ``thread_ts`` set to the anchor's timestamp.
    """

    def __init__(self, client: AsyncWebClient, idle_reaction: str = "zzz") -> None:
        """Initialize the sink.

        Args:
            client: Slack AsyncWebClient instance.
            idle_reaction: Emoji name added to the anchor of an idle thread.
        """
        self._client = client
        self._idle_reaction = idle_reaction
        self._bot_user_id: str | None = None

    async def send(self, channel: ChannelHandle, text: str) -> MessageHandle:
        """Post a message to a channel or thread.

        Args:
            channel: Target channel or thread.
            text: Message content.

        Returns:
            Handle of the posted message.

        Raises:
            ChannelNotAccessibleError: If the channel is not accessible
                (not_in_channel, channel_not_found, is_archived).
            SlackApiError: If the API call fails for other reasons.
        """
        try:
            response = await self._client.chat_postMessage(
                channel=channel.channel_id,
                text=text,
                thread_ts=channel.thread_ts,
            )
        except SlackApiError as e:
            self._raise_if_not_accessible(e, channel.channel_id)
            raise
        return MessageHandle(
            channel_id=response.get("channel") or channel.channel_id,
            ts=response["ts"],
        )

    async def edit(self, message: MessageHandle, text: str) -> None:
        """Replace the text of a posted message.

        Raises:
            ChannelNotAccessibleError: If the channel is not accessible.
            SlackApiError: If the API call fails for other reasons.
        """
        try:
            await self._client.chat_update(
                channel=message.channel_id,
                ts=message.ts,
                text=text,
            )
        except SlackApiError as e:
            self._raise_if_not_accessible(e, message.channel_id)
            raise

    async def create_thread(self, origin: Message, title: str) -> ChannelHandle:
        """Return the thread anchored at the origin message.

        Slack threads have no title; it is only logged.
        """
        thread_ts = origin.thread_ts or origin.id
        logger.debug(
            "Starting thread '%s' in %s at %s", title, origin.channel_id, thread_ts
        )
        return ChannelHandle(channel_id=origin.channel_id, thread_ts=thread_ts)

    async def archive_thread(self, thread: ChannelHandle) -> None:
        """Mark an idle thread by reacting to its anchor message.

        Raises:
            SlackApiError: If the reaction cannot be added.
        """
        if thread.thread_ts is None:
            return
        try:
            await self._client.reactions_add(
                channel=thread.channel_id,
                timestamp=thread.thread_ts,
                name=self._idle_reaction,
            )
        except SlackApiError as e:
            if _error_code(e) == "already_reacted":
                return
            raise

    async def get_bot_user_id(self) -> str:
        """Get the bot's user ID.

        Returns:
            The bot's user ID.

        Note:
            The result is cached after the first call.
        """
        if self._bot_user_id is None:
            response = await self._client.auth_test()
            self._bot_user_id = response["user_id"]
        return self._bot_user_id

    @staticmethod
    def _raise_if_not_accessible(error: SlackApiError, channel_id: str) -> None:
        error_code = _error_code(error)
        if error_code in _CHANNEL_NOT_ACCESSIBLE_ERRORS:
            raise ChannelNotAccessibleError(
                channel_id, f"Cannot access channel {channel_id}: {error_code}"
            ) from error
