"""Table backing the SQL key-value store."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class KeyValueEntry(SQLModel, table=True):
    """One string value stored under a string key."""

    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True, description="Storage key.")
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="UTC timestamp of the last write.",
    )
