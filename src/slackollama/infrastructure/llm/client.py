"""LLM client wrapper."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import litellm
from litellm.exceptions import AuthenticationError, RateLimitError

from slackollama.config import LLMConfig
from slackollama.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMRateLimitError,
)

logger = logging.getLogger(__name__)


class LLMClient:
    """LiteLLM wrapper client.

    This class provides a simplified interface to LiteLLM streaming
    completions, applying configuration and handling errors.
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the client.

        Args:
            config: LLM configuration (model, temperature, max_tokens, etc.).
        """
        self._config = config

    def _build_params(self, messages: list[dict[str, str]], **kwargs: Any) -> dict:
        params: dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "stream": True,
            "timeout": self._config.timeout_seconds,
        }
        if self._config.temperature is not None:
            params["temperature"] = self._config.temperature
        if self._config.max_tokens is not None:
            params["max_tokens"] = self._config.max_tokens
        if self._config.model.startswith(("ollama/", "ollama_chat/")):
            params["api_base"] = self._config.host
        params.update(kwargs)
        return params

    async def stream(
        self,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> AsyncIterator[str]:
        """Execute a streaming chat completion.

        Args:
            messages: OpenAI-format message list.
                [{"role": "system", "content": "..."}, ...]
            **kwargs: Additional parameters (override config).

        Yields:
            Text deltas as they arrive.

        Raises:
            LLMAuthenticationError: Invalid API key.
            LLMRateLimitError: Rate limit exceeded.
            LLMError: Other API errors.
        """
        params = self._build_params(messages, **kwargs)
        logger.debug("LLM request: model=%s", params["model"])

        try:
            response = await litellm.acompletion(**params)
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
            logger.debug("LLM response received")
        except AuthenticationError as e:
            logger.error("LLM authentication error: %s", e)
            raise LLMAuthenticationError(str(e)) from e
        except RateLimitError as e:
            logger.warning("LLM rate limit exceeded: %s", e)
            raise LLMRateLimitError(str(e)) from e
        except Exception as e:
            logger.error("LLM error: %s", e)
            raise LLMError(str(e)) from e
