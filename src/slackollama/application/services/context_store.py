"""Conversation context store."""

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from slackollama.domain.entities import ConversationContext
from slackollama.domain.repositories import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONTEXT_TTL_SECONDS = 60 * 60 * 24 * 7


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a single key-value store call.

    Attributes:
        value: Returned value (None on a miss or failure).
        error: Exception raised by the store, if any.
    """

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Check if the call succeeded."""
        return self.error is None


class ContextStore:
    """Persists continuation contexts by channel and by message.

    Two entries are written per turn: ``channel -> latest message id`` and
    ``message -> context``, both with the same TTL. Every miss, expiry or
    backing-store failure reads as "no context"; nothing here raises.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key_prefix: str = "slackollama",
        ttl_seconds: int = DEFAULT_CONTEXT_TTL_SECONDS,
    ) -> None:
        """Initialize the store.

        Args:
            store: Backing key-value store.
            key_prefix: Namespace for all keys.
            ttl_seconds: Expiry applied to every entry.
        """
        self._store = store
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    def channel_key(self, channel_id: str) -> str:
        """Key holding a channel's latest message id."""
        return f"{self._key_prefix}:channel:{channel_id}"

    def message_key(self, message_id: str) -> str:
        """Key holding a message's context."""
        return f"{self._key_prefix}:message:{message_id}"

    async def save(
        self,
        channel_id: str,
        message_id: str,
        context: ConversationContext,
    ) -> None:
        """Save a context as the channel's latest conversation.

        Overwrites any previous entry for the channel. The channel entry is
        only moved once the message entry has been written.

        Args:
            channel_id: Conversation scope key.
            message_id: Channel-qualified key of the message that started
                the turn (see ``Message.key``).
            context: Context returned by the inference service.
        """
        message_result = await self._write(
            self.message_key(message_id), context.raw
        )
        if not message_result.ok:
            return
        channel_result = await self._write(
            self.channel_key(channel_id), message_id
        )
        if channel_result.ok:
            logger.debug(
                "Saved context: channel=%s, message=%s", channel_id, message_id
            )

    async def load(
        self,
        *,
        channel_id: str | None = None,
        message_id: str | None = None,
    ) -> ConversationContext | None:
        """Load a context by channel or by message.

        By channel, the channel's latest message is resolved first.

        Args:
            channel_id: Conversation scope key.
            message_id: Channel-qualified message key.

        Returns:
            The stored context, or None when there is none.

        Raises:
            ValueError: If not exactly one of the arguments is given.
        """
        if (channel_id is None) == (message_id is None):
            raise ValueError("Specify exactly one of channel_id or message_id")

        if channel_id is not None:
            latest = await self._read(self.channel_key(channel_id))
            if latest.value is None:
                return None
            message_id = latest.value

        assert message_id is not None
        result = await self._read(self.message_key(message_id))
        if result.value is None:
            return None
        return ConversationContext(raw=result.value)

    async def _read(self, key: str) -> StoreResult[str]:
        try:
            return StoreResult(value=await self._store.get(key))
        except Exception as e:
            logger.warning("Context store read failed (key=%s): %s", key, e)
            return StoreResult(error=e)

    async def _write(self, key: str, value: str) -> StoreResult[None]:
        try:
            await self._store.set(key, value, self._ttl_seconds)
            return StoreResult()
        except Exception as e:
            logger.warning("Context store write failed (key=%s): %s", key, e)
            return StoreResult(error=e)
