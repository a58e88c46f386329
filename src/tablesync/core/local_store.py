"""Local record store interface consumed by the sync engine."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from .records import Record
from ..utils.logging import get_logger


class LocalRecordStore(ABC):
    """Abstract base class for local record stores.

    Records handed to ``apply_creates`` and ``apply_updates`` must end up
    persisted under their given ``id``.
    """

    @abstractmethod
    def snapshot(self) -> List[Record]:
        """Return every local record."""
        pass

    @abstractmethod
    def apply_creates(self, records: Sequence[Record]) -> None:
        """Persist records that so far exist only remotely."""
        pass

    @abstractmethod
    def apply_updates(self, records: Sequence[Record]) -> None:
        """Overwrite local records with newer remote versions."""
        pass


class InMemoryRecordStore(LocalRecordStore):
    """Dict-backed store, for embedding and tests."""

    def __init__(self, records: Optional[Iterable[Record]] = None):
        self.logger = get_logger(self.__class__.__name__)
        self._records: Dict[str, Record] = {}
        for record in records or []:
            self._records[record.id] = record.without_remote_key()

    def snapshot(self) -> List[Record]:
        return list(self._records.values())

    def get(self, record_id: str) -> Optional[Record]:
        return self._records.get(record_id)

    def apply_creates(self, records: Sequence[Record]) -> None:
        for record in records:
            self._records[record.id] = record.without_remote_key()
        self.logger.info("Applied local creates", count=len(records))

    def apply_updates(self, records: Sequence[Record]) -> None:
        for record in records:
            existing = self._records.get(record.id)
            if existing is None:
                self.logger.warning("Update for unknown local record", record_id=record.id)
                continue
            updated = record.without_remote_key()
            # An absent remote last_used keeps the local one
            if updated.last_used is None:
                updated.last_used = existing.last_used
            self._records[record.id] = updated
        self.logger.info("Applied local updates", count=len(records))

    def __len__(self) -> int:
        return len(self._records)
