"""Redis-backed storage."""

from slackollama.infrastructure.redis_store.key_value_store import RedisKeyValueStore

__all__ = ["RedisKeyValueStore"]
