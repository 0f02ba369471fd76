"""SQLite implementation of KeyValueStore."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from slackollama.infrastructure.persistence.database import DatabaseManager
from slackollama.infrastructure.persistence.datetime_utils import to_naive_utc
from slackollama.infrastructure.persistence.exceptions import KeyValueStoreError
from slackollama.infrastructure.persistence.models import KeyValueModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SQLiteKeyValueStore:
    """SQLite 版 KeyValueStore 実装

    有効期限付きのキーと値を key_values テーブルに保存する。
    期限切れの行は読み取り時に存在しないものとして扱い、
    purge_expired でまとめて削除する。
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """初期化

        Args:
            db_manager: データベース管理
            clock: 現在時刻を返す関数（テスト用）
        """
        self._db_manager = db_manager
        self._session_factory: Callable[
            [], AbstractAsyncContextManager[AsyncSession]
        ] = db_manager.get_session
        self._clock = clock

    def _now(self) -> datetime:
        return to_naive_utc(self._clock())

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """値を保存（upsert）

        Args:
            key: キー
            value: 値
            ttl_seconds: 有効期限（秒）

        Raises:
            KeyValueStoreError: データベース操作に失敗
        """
        expires_at = self._now() + timedelta(seconds=ttl_seconds)
        stmt = (
            insert(KeyValueModel)
            .values(key=key, value=value, expires_at=expires_at)
            .on_conflict_do_update(
                index_elements=["key"],
                set_={"value": value, "expires_at": expires_at},
            )
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"Failed to set {key}: {e}") from e

    async def get(self, key: str) -> str | None:
        """値を取得

        Args:
            key: キー

        Returns:
            値（存在しない・期限切れの場合は None）

        Raises:
            KeyValueStoreError: データベース操作に失敗
        """
        try:
            async with self._session_factory() as session:
                statement = select(KeyValueModel).where(
                    KeyValueModel.key == key,
                    KeyValueModel.expires_at > self._now(),  # type: ignore[operator]
                )
                result = await session.exec(statement)
                model = result.first()
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"Failed to get {key}: {e}") from e
        return model.value if model is not None else None

    async def delete(self, key: str) -> None:
        """キーを削除

        Args:
            key: キー

        Raises:
            KeyValueStoreError: データベース操作に失敗
        """
        try:
            async with self._session_factory() as session:
                stmt = delete(KeyValueModel).where(
                    KeyValueModel.key == key  # type: ignore[arg-type]
                )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"Failed to delete {key}: {e}") from e

    async def keys(self, pattern: str) -> list[str]:
        """パターンに一致する有効なキーを列挙

        Args:
            pattern: glob パターン（例: "prefix:thread:*"）

        Returns:
            一致したキーのリスト（昇順）

        Raises:
            KeyValueStoreError: データベース操作に失敗
        """
        try:
            async with self._session_factory() as session:
                # SQLite GLOB is case-sensitive and supports * ? and [...]
                matches = KeyValueModel.key.op("GLOB")(pattern)  # type: ignore
                live = KeyValueModel.expires_at > self._now()  # type: ignore[operator]
                statement = (
                    select(KeyValueModel.key)
                    .where(matches, live)
                    .order_by(KeyValueModel.key)  # type: ignore[arg-type]
                )
                result = await session.exec(statement)
                return list(result.all())
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"Failed to list keys: {e}") from e

    async def purge_expired(self) -> int:
        """期限切れのキーを削除

        Returns:
            削除したキー数

        Raises:
            KeyValueStoreError: データベース操作に失敗
        """
        try:
            async with self._session_factory() as session:
                stmt = delete(KeyValueModel).where(
                    KeyValueModel.expires_at <= self._now()  # type: ignore[operator]
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"Failed to purge expired keys: {e}") from e
        return result.rowcount or 0  # type: ignore[union-attr]

    async def is_healthy(self) -> bool:
        """データベースに接続できるか確認"""
        return await self._db_manager.is_healthy()

    async def close(self) -> None:
        """データベース接続を閉じる"""
        await self._db_manager.close()
