"""KeyValueStore repository protocol."""

from typing import Protocol


class KeyValueStore(Protocol):
    """有効期限付きキーバリューストア

    会話コンテキストとスレッドの活動マーカーを保存する。
    期限切れのキーは存在しないものとして扱う。
    """

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """値を保存（上書き）

        Args:
            key: キー
            value: 値
            ttl_seconds: 有効期限（秒）
        """
        ...

    async def get(self, key: str) -> str | None:
        """値を取得

        Args:
            key: キー

        Returns:
            値（存在しない・期限切れの場合は None）
        """
        ...

    async def delete(self, key: str) -> None:
        """キーを削除

        Args:
            key: キー
        """
        ...

    async def keys(self, pattern: str) -> list[str]:
        """パターンに一致する有効なキーを列挙

        Args:
            pattern: glob パターン（例: "prefix:thread:*"）

        Returns:
            一致したキーのリスト
        """
        ...

    async def purge_expired(self) -> int:
        """期限切れのキーを削除

        Returns:
            削除したキー数
        """
        ...

    async def is_healthy(self) -> bool:
        """ストアに到達できるか確認"""
        ...

    async def close(self) -> None:
        """接続を閉じる"""
        ...
