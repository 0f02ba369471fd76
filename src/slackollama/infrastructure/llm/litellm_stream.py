"""LiteLLM generation stream."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from slackollama.config import LLMConfig
from slackollama.domain.entities import ConversationContext, GenerationChunk
from slackollama.infrastructure.llm.client import LLMClient

logger = logging.getLogger(__name__)


class LiteLLMGenerationStream:
    """GenerationStream implementation using LiteLLM chat completions.

    Chat models have no continuation token, so the context handed back on
    the final chunk is the conversation itself: the list of user and
    assistant messages, trimmed to the most recent ``max_history_messages``.
    """

    def __init__(
        self,
        client: LLMClient,
        config: LLMConfig,
        *,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the stream supplier.

        Args:
            client: LLMClient instance.
            config: LLM configuration.
            debug_llm_messages: If True, log LLM messages at INFO level.
        """
        self._client = client
        self._config = config
        self._debug_llm_messages = debug_llm_messages

    async def generate(
        self,
        prompt: str,
        context: ConversationContext | None = None,
    ) -> AsyncIterator[GenerationChunk]:
        """Stream a generation.

        Args:
            prompt: User prompt.
            context: Previous conversation (list of chat messages).

        Yields:
            One chunk per text delta, then a final done chunk with context.

        Raises:
            LLMError: If response generation fails.
        """
        history = self._history_from(context)
        user_message = {"role": "user", "content": prompt}

        messages: list[dict[str, str]] = []
        if self._config.system_prompt:
            messages.append({"role": "system", "content": self._config.system_prompt})
        messages.extend(history)
        messages.append(user_message)

        if self._should_log():
            self._log_messages(messages)

        parts: list[str] = []
        async for delta in self._client.stream(messages):
            parts.append(delta)
            yield GenerationChunk(response=delta)

        reply = "".join(parts)
        if self._should_log():
            self._log_response(reply)

        updated = [*history, user_message, {"role": "assistant", "content": reply}]
        updated = updated[-self._config.max_history_messages :]
        yield GenerationChunk(
            response="",
            done=True,
            context=ConversationContext.from_value(updated),
        )

    def _history_from(self, context: ConversationContext | None) -> list[dict[str, Any]]:
        """Extract previous chat messages from a context."""
        if context is None:
            return []
        try:
            value = context.value
        except ValueError:
            logger.warning("Ignoring unreadable conversation context")
            return []
        if not isinstance(value, list):
            logger.warning("Ignoring conversation context of type %s", type(value))
            return []
        return [
            item
            for item in value
            if isinstance(item, dict) and item.get("role") in {"user", "assistant"}
        ]

    def _should_log(self) -> bool:
        """Check if logging should occur."""
        return self._debug_llm_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_messages(self, messages: list[dict[str, str]]) -> None:
        """Log LLM request messages."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Request Messages ===")
        for i, msg in enumerate(messages):
            role = msg.get("role", "unknown")
            content = msg.get("content", "")
            log_func("[%d] role=%s", i, role)
            log_func("    content: %s", content)
        log_func("=== End of Messages ===")

    def _log_response(self, response: str) -> None:
        """Log LLM response."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Response ===")
        log_func("response: %s", response)
        log_func("=== End of Response ===")
