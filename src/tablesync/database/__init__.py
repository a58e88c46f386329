"""Database package for the local record store."""

from .database import DatabaseManager, init_database
from .models import Base, RecordModel
from .store import SQLAlchemyRecordStore

__all__ = [
    "DatabaseManager",
    "init_database",
    "Base",
    "RecordModel",
    "SQLAlchemyRecordStore"
]
