"""LLM integration."""

from slackollama.infrastructure.llm.client import LLMClient
from slackollama.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMRateLimitError,
)
from slackollama.infrastructure.llm.litellm_stream import LiteLLMGenerationStream
from slackollama.infrastructure.llm.ollama import OllamaGenerationStream
from slackollama.infrastructure.llm.templates import JinjaPromptBuilder

__all__ = [
    "JinjaPromptBuilder",
    "LLMAuthenticationError",
    "LLMClient",
    "LLMError",
    "LLMRateLimitError",
    "LiteLLMGenerationStream",
    "OllamaGenerationStream",
]
