"""SQLAlchemy-backed implementation of the local record store."""

from typing import List, Sequence

from .database import DatabaseManager
from .models import RecordModel
from ..core.local_store import LocalRecordStore
from ..core.records import Record
from ..utils.logging import get_logger, log_execution_time


logger = get_logger("database.store")


class SQLAlchemyRecordStore(LocalRecordStore):
    """Stores records in the ``records`` table."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @log_execution_time
    def snapshot(self) -> List[Record]:
        with self.db_manager.session_scope() as session:
            rows = session.query(RecordModel).order_by(RecordModel.updated_at.desc()).all()
            return [row.to_record() for row in rows]

    @log_execution_time
    def apply_creates(self, records: Sequence[Record]) -> None:
        created = 0
        updated = 0
        with self.db_manager.session_scope() as session:
            for record in records:
                existing = session.get(RecordModel, record.id)
                if existing is not None:
                    # The row appeared since the snapshot was taken
                    existing.apply(record)
                    updated += 1
                else:
                    session.add(RecordModel.from_record(record))
                    created += 1

        logger.info("Local records created", created=created, merged_into_existing=updated)

    @log_execution_time
    def apply_updates(self, records: Sequence[Record]) -> None:
        updated = 0
        with self.db_manager.session_scope() as session:
            for record in records:
                existing = session.get(RecordModel, record.id)
                if existing is None:
                    logger.warning("Update for unknown local record", record_id=record.id)
                    continue
                existing.apply(record)
                updated += 1

        logger.info("Local records updated", updated=updated, requested=len(records))

    @log_execution_time
    def upsert(self, record: Record) -> None:
        """Insert or overwrite one record, e.g. when the user edits it."""
        with self.db_manager.session_scope() as session:
            existing = session.get(RecordModel, record.id)
            if existing is None:
                session.add(RecordModel.from_record(record))
            else:
                existing.apply(record)

    def count(self) -> int:
        with self.db_manager.session_scope() as session:
            return session.query(RecordModel).count()
