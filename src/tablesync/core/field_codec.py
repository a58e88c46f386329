"""Mapping between Record and the remote table's field bag.

The remote table is schema-flexible: every value arrives as loosely typed
JSON. Everything that touches raw field dictionaries lives here, so the rest
of the engine only ever sees Record instances.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .records import Record
from ..exceptions import FieldDecodeError


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)

FIELD_ID = "id"
FIELD_TITLE = "title"
FIELD_CONTENT = "content"
FIELD_TAGS = "tags"
FIELD_IS_FAVORITE = "isFavorite"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"
FIELD_LAST_USED = "lastUsed"

DEFAULT_TITLE = "untitled"
DEFAULT_CONTENT = ""
DEFAULT_TAGS = "[]"

# isFavorite is a single-select column, so it carries option labels
FAVORITE_TRUE = "是"
FAVORITE_FALSE = "否"


def datetime_to_millis(value: datetime) -> int:
    """Epoch milliseconds, computed without float rounding."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // ONE_MILLISECOND


def millis_to_datetime(value: int) -> datetime:
    """Inverse of ``datetime_to_millis``.

    Raises:
        OverflowError: If the value is outside the datetime range
    """
    return EPOCH + timedelta(milliseconds=value)


class FieldCodec:
    """Encodes records into field bags and decodes them back."""

    def __init__(
        self,
        favorite_true: str = FAVORITE_TRUE,
        favorite_false: str = FAVORITE_FALSE
    ):
        self.favorite_true = favorite_true
        self.favorite_false = favorite_false

    def encode(self, record: Record) -> Dict[str, Any]:
        """Build the field bag sent on create and update.

        ``lastUsed`` is left out when the record has none, so an update
        never overwrites a value already stored remotely with null.
        """
        fields: Dict[str, Any] = {
            FIELD_ID: record.id,
            FIELD_TITLE: record.title,
            FIELD_CONTENT: record.content,
            FIELD_TAGS: record.tags,
            FIELD_IS_FAVORITE: self.favorite_true if record.is_favorite else self.favorite_false,
            FIELD_CREATED_AT: datetime_to_millis(record.created_at),
            FIELD_UPDATED_AT: datetime_to_millis(record.updated_at),
        }
        if record.last_used is not None:
            fields[FIELD_LAST_USED] = datetime_to_millis(record.last_used)
        return fields

    def decode(self, fields: Dict[str, Any], remote_key: Optional[str] = None) -> Record:
        """Build a Record from a remote field bag.

        Raises:
            FieldDecodeError: If ``id``, ``createdAt`` or ``updatedAt`` is
                missing or unusable
        """
        if not isinstance(fields, dict):
            raise FieldDecodeError(f"Fields of record {remote_key} are not an object")

        record_id = self._text(fields, FIELD_ID)
        if record_id is None:
            raise FieldDecodeError(
                f"Field '{FIELD_ID}' is missing or not text (record {remote_key})"
            )

        title = self._text(fields, FIELD_TITLE)
        content = self._text(fields, FIELD_CONTENT)
        tags = self._text(fields, FIELD_TAGS)

        created_at = self._timestamp(fields, FIELD_CREATED_AT)
        updated_at = self._timestamp(fields, FIELD_UPDATED_AT)

        try:
            last_used = self._timestamp(fields, FIELD_LAST_USED)
        except FieldDecodeError:
            last_used = None

        return Record(
            id=record_id,
            title=title if title is not None else DEFAULT_TITLE,
            content=content if content is not None else DEFAULT_CONTENT,
            tags=tags if tags is not None else DEFAULT_TAGS,
            is_favorite=fields.get(FIELD_IS_FAVORITE) == self.favorite_true,
            created_at=created_at,
            updated_at=updated_at,
            last_used=last_used,
            remote_key=remote_key,
        )

    @staticmethod
    def _text(fields: Dict[str, Any], key: str) -> Optional[str]:
        value = fields.get(key)
        return value if isinstance(value, str) else None

    @staticmethod
    def _timestamp(fields: Dict[str, Any], key: str) -> datetime:
        if key not in fields:
            raise FieldDecodeError(f"Timestamp field '{key}' is missing")

        value = fields[key]
        # bool is an int subclass but never a timestamp
        if isinstance(value, bool) or not isinstance(value, int):
            raise FieldDecodeError(f"Timestamp field '{key}' has non-integer value {value!r}")

        try:
            return millis_to_datetime(value)
        except OverflowError as e:
            raise FieldDecodeError(
                f"Timestamp field '{key}' value {value} is not a valid millisecond timestamp"
            ) from e
