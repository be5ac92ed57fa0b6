"""RecordEntry 键值存储模型."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class RecordEntry(SQLModel, table=True):
    """集合持久化条目（每个集合一条 JSON 记录）."""

    __tablename__ = "kv_store"  # type: ignore[assignment]

    key: str = Field(primary_key=True, description="集合键")
    value: str = Field(description="集合 JSON")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
