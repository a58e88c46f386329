"""Record and plan types shared by the planner, codec and stores."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_millisecond_precision(value: datetime) -> datetime:
    """UTC value truncated to whole milliseconds, the precision stored remotely."""
    value = ensure_utc(value)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


@dataclass
class Record:
    """One synchronized item, identified by its client-generated id."""

    id: str
    title: str
    content: str
    tags: str
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
    last_used: Optional[datetime] = None
    # Identifier assigned by the remote service, never used as a join key
    remote_key: Optional[str] = None

    def __post_init__(self):
        self.created_at = to_millisecond_precision(self.created_at)
        self.updated_at = to_millisecond_precision(self.updated_at)
        if self.last_used is not None:
            self.last_used = to_millisecond_precision(self.last_used)

    def without_remote_key(self) -> "Record":
        return replace(self, remote_key=None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": self.tags,
            "is_favorite": self.is_favorite,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "last_used": self.last_used.isoformat() if self.last_used else None,
            "remote_key": self.remote_key,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Build a record from the output of ``to_dict``."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            tags=data.get("tags", "[]"),
            is_favorite=bool(data.get("is_favorite", False)),
            created_at=_parse_datetime(data["created_at"]),
            updated_at=_parse_datetime(data["updated_at"]),
            last_used=_parse_datetime(data.get("last_used")),
            remote_key=data.get("remote_key"),
        )


@dataclass
class SyncPlan:
    """Actions computed by one planning pass."""

    to_create_local: List[Record] = field(default_factory=list)
    to_update_local: List[Record] = field(default_factory=list)
    to_create_remote: List[Record] = field(default_factory=list)
    to_update_remote: List[Tuple[str, Record]] = field(default_factory=list)
    # Ids that needed a remote update but whose remote copy had no remote_key
    skipped_updates: List[str] = field(default_factory=list)

    @property
    def total_actions(self) -> int:
        return (
            len(self.to_create_local)
            + len(self.to_update_local)
            + len(self.to_create_remote)
            + len(self.to_update_remote)
        )

    @property
    def is_empty(self) -> bool:
        return self.total_actions == 0

    def summary(self) -> Dict[str, int]:
        return {
            "create_local": len(self.to_create_local),
            "update_local": len(self.to_update_local),
            "create_remote": len(self.to_create_remote),
            "update_remote": len(self.to_update_remote),
            "skipped_updates": len(self.skipped_updates),
        }
