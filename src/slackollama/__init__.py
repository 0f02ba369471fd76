"""slackollama - Slack bot relaying mentions to a local Ollama model."""

__version__ = "0.1.0"
