"""Slack message lookup."""

from slack_sdk.web.async_client import AsyncWebClient

from slackollama.domain.entities import MessageReference


class SlackMessageFetcher:
    """Slack implementation of MessageFetcher.

    Fetches a single message using the Slack history APIs.
    """

    def __init__(self, client: AsyncWebClient) -> None:
        """Initialize the fetcher.

        Args:
            client: Slack AsyncWebClient.
        """
        self._client = client

    async def fetch_text(self, reference: MessageReference) -> str | None:
        """Fetch the text of a referenced message.

        Uses conversations.replies for thread replies and
        conversations.history otherwise.

        Args:
            reference: Message to fetch.

        Returns:
            Message text, or None if the message was not found.
        """
        if reference.thread_ts and reference.thread_ts != reference.message_id:
            response = await self._client.conversations_replies(
                channel=reference.channel_id,
                ts=reference.thread_ts,
                oldest=reference.message_id,
                latest=reference.message_id,
                inclusive=True,
            )
        else:
            response = await self._client.conversations_history(
                channel=reference.channel_id,
                oldest=reference.message_id,
                latest=reference.message_id,
                inclusive=True,
                limit=1,
            )

        for msg in response.get("messages", []):
            if msg.get("ts") == reference.message_id:
                return msg.get("text", "")
        return None
