"""Ollama generation stream."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from slackollama.config import LLMConfig
from slackollama.domain.entities import ConversationContext, GenerationChunk
from slackollama.infrastructure.llm.exceptions import LLMError

logger = logging.getLogger(__name__)


class OllamaGenerationStream:
    """GenerationStream implementation using Ollama's /api/generate.

    Streams newline-delimited JSON objects. The ``context`` array Ollama
    returns on the final object is passed through as the opaque
    continuation context.
    """

    def __init__(
        self,
        config: LLMConfig,
        client: httpx.AsyncClient | None = None,
        *,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the stream supplier.

        Args:
            config: LLM configuration (model, host, options).
            client: HTTP client. Created from config when omitted.
            debug_llm_messages: If True, log prompts and replies at INFO level.
        """
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.host,
            timeout=httpx.Timeout(config.timeout_seconds, connect=10.0),
        )
        self._debug_llm_messages = debug_llm_messages

    def _build_payload(
        self,
        prompt: str,
        context: ConversationContext | None,
        *,
        stream: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": stream,
            "keep_alive": self._config.keep_alive,
        }
        if self._config.system_prompt:
            payload["system"] = self._config.system_prompt
        if context is not None:
            payload["context"] = context.value

        options: dict[str, Any] = {}
        if self._config.temperature is not None:
            options["temperature"] = self._config.temperature
        if self._config.max_tokens is not None:
            options["num_predict"] = self._config.max_tokens
        if options:
            payload["options"] = options
        return payload

    async def generate(
        self,
        prompt: str,
        context: ConversationContext | None = None,
    ) -> AsyncIterator[GenerationChunk]:
        """Stream a generation.

        Args:
            prompt: User prompt.
            context: Continuation context from a previous turn.

        Yields:
            GenerationChunk per streamed object; the last has done=True.

        Raises:
            LLMError: If the request fails or Ollama reports an error.
        """
        payload = self._build_payload(prompt, context, stream=True)
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("Ollama request: model=%s, prompt=%s", self._config.model, prompt)

        try:
            async with self._client.stream(
                "POST", "/api/generate", json=payload
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", "replace")
                    raise LLMError(
                        f"Ollama returned HTTP {response.status_code}: {body[:200]}"
                    )

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    chunk = self._parse_line(line)
                    if chunk.done:
                        log_func("Ollama response completed")
                    yield chunk
        except httpx.HTTPError as e:
            logger.error("Ollama request failed: %s", e)
            raise LLMError(str(e)) from e

    def _parse_line(self, line: str) -> GenerationChunk:
        """Convert one NDJSON line to a GenerationChunk.

        Raises:
            LLMError: If the line is not JSON or carries an error.
        """
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise LLMError(f"Malformed Ollama stream line: {line[:200]!r}") from e

        if "error" in data:
            raise LLMError(f"Ollama error: {data['error']}")

        raw_context = data.get("context")
        return GenerationChunk(
            response=data.get("response") or "",
            done=bool(data.get("done", False)),
            context=(
                ConversationContext.from_value(raw_context)
                if raw_context is not None
                else None
            ),
        )

    async def warm_up(self) -> bool:
        """Load the model into memory ahead of the first mention.

        Returns:
            True if Ollama answered, False on any failure.
        """
        payload = self._build_payload("Hello", None, stream=False)
        try:
            response = await self._client.post("/api/generate", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Model warm-up failed: %s", e)
            return False
        logger.info("Model %s warmed up", self._config.model)
        return True

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
