"""SQLModel table definitions."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class KeyValueModel(SQLModel, table=True):
    """キーバリューテーブル"""

    __tablename__ = "key_values"

    id: int | None = Field(default=None, primary_key=True)
    key: str = Field(unique=True, index=True)
    value: str
    expires_at: datetime = Field(index=True)  # naive UTC
