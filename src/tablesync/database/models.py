"""Database models for the local record store."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, String, DateTime, Boolean, Text
from sqlalchemy.orm import declarative_base

from ..core.records import Record, ensure_utc


Base = declarative_base()


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo, so values are stored as naive UTC."""
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)


def from_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


class RecordModel(Base):
    """Database model for a synchronized record."""

    __tablename__ = "records"

    id = Column(String(64), primary_key=True, index=True)
    title = Column(String(500), nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    # JSON array literal, kept opaque
    tags = Column(Text, nullable=False, default="[]")
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False, index=True)
    last_used_at = Column(DateTime, nullable=True)

    @classmethod
    def from_record(cls, record: Record) -> "RecordModel":
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            tags=record.tags,
            is_favorite=record.is_favorite,
            created_at=to_naive_utc(record.created_at),
            updated_at=to_naive_utc(record.updated_at),
            # Records arriving without last_used fall back to their creation time
            last_used_at=to_naive_utc(record.last_used or record.created_at),
        )

    def apply(self, record: Record) -> None:
        """Overwrite with a newer version; keep last_used when the update has none."""
        self.title = record.title
        self.content = record.content
        self.tags = record.tags
        self.is_favorite = record.is_favorite
        self.updated_at = to_naive_utc(record.updated_at)
        if record.last_used is not None:
            self.last_used_at = to_naive_utc(record.last_used)

    def to_record(self) -> Record:
        return Record(
            id=self.id,
            title=self.title,
            content=self.content,
            tags=self.tags,
            is_favorite=bool(self.is_favorite),
            created_at=from_naive_utc(self.created_at),
            updated_at=from_naive_utc(self.updated_at),
            last_used=from_naive_utc(self.last_used_at),
        )

    def __repr__(self):
        return f"<RecordModel(id='{self.id}', title='{self.title}')>"
