"""Domain repositories."""

from slackollama.domain.repositories.key_value_store import KeyValueStore

__all__ = ["KeyValueStore"]
