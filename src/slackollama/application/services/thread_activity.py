"""Idle thread tracking."""

import logging

from slackollama.domain.entities import ChannelHandle
from slackollama.domain.repositories import KeyValueStore
from slackollama.domain.services import ChatSink

logger = logging.getLogger(__name__)


class ThreadActivityTracker:
    """Marks threads active and archives the ones that went quiet.

    Each reply into a thread refreshes a short-lived liveness key. An index
    key with a long TTL remembers the thread so that the sweep can notice the
    liveness key expiring.
    """

    def __init__(
        self,
        store: KeyValueStore,
        sink: ChatSink,
        *,
        key_prefix: str = "slackollama",
        idle_ttl_seconds: int = 600,
        index_ttl_seconds: int = 60 * 60 * 24 * 7,
    ) -> None:
        """Initialize the tracker.

        Args:
            store: Backing key-value store.
            sink: Chat sink used to archive idle threads.
            key_prefix: Namespace for all keys.
            idle_ttl_seconds: Inactivity after which a thread counts as idle.
            index_ttl_seconds: How long a thread stays tracked at most.
        """
        self._store = store
        self._sink = sink
        self._key_prefix = key_prefix
        self._idle_ttl_seconds = idle_ttl_seconds
        self._index_ttl_seconds = index_ttl_seconds

    def _liveness_key(self, thread_key: str) -> str:
        return f"{self._key_prefix}:thread:{thread_key}"

    def _index_key(self, thread_key: str) -> str:
        return f"{self._key_prefix}:thread-index:{thread_key}"

    async def touch_thread(self, thread: ChannelHandle) -> None:
        """Mark a thread as active.

        Args:
            thread: Thread handle.
        """
        if not thread.is_thread:
            return
        await self._store.set(
            self._liveness_key(thread.key), "1", self._idle_ttl_seconds
        )
        await self._store.set(
            self._index_key(thread.key), thread.key, self._index_ttl_seconds
        )

    async def sweep(self) -> int:
        """Archive every tracked thread whose liveness key has expired.

        Returns:
            Number of threads archived.
        """
        archived = 0
        index_keys = await self._store.keys(self._index_key("*"))

        for index_key in index_keys:
            thread_key = index_key.removeprefix(self._index_key(""))
            if await self._store.get(self._liveness_key(thread_key)) is not None:
                continue

            channel_id, _, thread_ts = thread_key.partition(":")
            if not thread_ts:
                await self._store.delete(index_key)
                continue

            try:
                await self._sink.archive_thread(
                    ChannelHandle(channel_id=channel_id, thread_ts=thread_ts)
                )
            except Exception as e:
                logger.warning("Failed to archive idle thread %s: %s", thread_key, e)
                continue

            await self._store.delete(index_key)
            archived += 1
            logger.info("Archived idle thread %s", thread_key)

        purged = await self._store.purge_expired()
        if purged:
            logger.debug("Purged %d expired keys", purged)

        return archived
