"""API clients for the remote table service."""

from .base import BaseServiceClient
from .error_codes import CURATED_MESSAGES, describe_error_code
from .models import TableField
from .reader import RecordReader, ListResult, SkippedItem
from .writer import RecordWriter

__all__ = [
    # Base client and error table
    "BaseServiceClient",
    "CURATED_MESSAGES",
    "describe_error_code",

    # Record access
    "RecordReader",
    "RecordWriter",
    "ListResult",
    "SkippedItem",
    "TableField"
]
