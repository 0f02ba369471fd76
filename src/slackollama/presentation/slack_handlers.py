"""Slack event handlers."""

import logging

from slack_bolt.async_app import AsyncApp

from slackollama.application.use_cases import ReplyToMentionUseCase
from slackollama.infrastructure.slack import SlackEventAdapter

logger = logging.getLogger(__name__)

HANDLED_SUBTYPES = {None, "thread_broadcast"}


def register_handlers(
    app: AsyncApp,
    reply_use_case: ReplyToMentionUseCase,
    event_adapter: SlackEventAdapter,
    bot_user_id: str,
) -> None:
    """Register Slack event handlers.

    Args:
        app: AsyncApp instance.
        reply_use_case: Use case for replying to mentions.
        event_adapter: Adapter for converting events to entities.
        bot_user_id: The bot's user ID.
    """

    @app.event("app_mention")
    async def handle_app_mention(event: dict) -> None:
        """Handle app_mention events (no-op).

        The same mention also arrives as a message event, which is where
        it gets answered.
        """
        logger.debug("Received app_mention event: %s", event.get("ts"))

    @app.event("message")
    async def handle_message(event: dict) -> None:
        """Handle message events.

        Args:
            event: Slack event payload.
        """
        if event.get("subtype") not in HANDLED_SUBTYPES:
            return
        if event.get("bot_id"):
            return

        text = event.get("text", "")
        if f"<@{bot_user_id}" not in text:
            return

        logger.info("Received message with mention: %s", event.get("ts"))

        try:
            message = event_adapter.to_message(event)
        except Exception:
            logger.exception("Error converting event to message")
            return

        try:
            await reply_use_case.execute(message)
        except Exception:
            logger.exception("Error replying to mention %s", message.id)
