"""Tests for the Record <-> field bag codec."""

from datetime import datetime, timezone

import pytest

from tablesync.core.field_codec import (
    FieldCodec,
    datetime_to_millis,
    millis_to_datetime,
    DEFAULT_TITLE,
)
from tablesync.exceptions import FieldDecodeError

from conftest import at, make_record


CREATED_MS = 1714564800000
UPDATED_MS = 1714568400123


def remote_fields(**overrides):
    fields = {
        "id": "p-1",
        "title": "Summarize",
        "content": "Summarize the following text",
        "tags": '["writing", "summary"]',
        "isFavorite": "是",
        "createdAt": CREATED_MS,
        "updatedAt": UPDATED_MS,
        "lastUsed": UPDATED_MS,
    }
    fields.update(overrides)
    return fields


class TestTimestamps:
    """Epoch millisecond conversion."""

    def test_known_value(self):
        value = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
        assert datetime_to_millis(value) == 1714564800123
        assert millis_to_datetime(1714564800123) == value

    def test_naive_datetime_is_treated_as_utc(self):
        naive = datetime(2024, 5, 1, 12, 0, 0)
        assert datetime_to_millis(naive) == 1714564800000

    def test_sub_millisecond_precision_is_truncated(self):
        value = datetime(2024, 5, 1, 12, 0, 0, 123999, tzinfo=timezone.utc)
        assert datetime_to_millis(value) == 1714564800123


class TestEncode:
    """Encoding a Record into the remote field bag."""

    def test_encode_all_fields(self):
        record = make_record("p-1", updated=500, is_favorite=True, last_used=at(900))
        fields = FieldCodec().encode(record)

        assert fields["id"] == "p-1"
        assert fields["title"] == "Prompt p-1"
        assert fields["tags"] == '["test"]'
        assert fields["isFavorite"] == "是"
        assert fields["createdAt"] == datetime_to_millis(at(0))
        assert fields["updatedAt"] == datetime_to_millis(at(500))
        assert fields["lastUsed"] == datetime_to_millis(at(900))

    def test_not_favorite_uses_false_token(self):
        fields = FieldCodec().encode(make_record("p-1"))
        assert fields["isFavorite"] == "否"

    def test_last_used_omitted_when_absent(self):
        fields = FieldCodec().encode(make_record("p-1", last_used=None))
        assert "lastUsed" not in fields

    def test_custom_favorite_tokens(self):
        codec = FieldCodec(favorite_true="yes", favorite_false="no")
        assert codec.encode(make_record("a", is_favorite=True))["isFavorite"] == "yes"
        assert codec.encode(make_record("b"))["isFavorite"] == "no"


class TestDecode:
    """Decoding remote field bags."""

    def test_decode_complete_item(self):
        record = FieldCodec().decode(remote_fields(), remote_key="rec001")

        assert record.id == "p-1"
        assert record.title == "Summarize"
        assert record.tags == '["writing", "summary"]'
        assert record.is_favorite is True
        assert record.created_at == millis_to_datetime(CREATED_MS)
        assert record.updated_at == millis_to_datetime(UPDATED_MS)
        assert record.last_used == millis_to_datetime(UPDATED_MS)
        assert record.remote_key == "rec001"

    @pytest.mark.parametrize("missing", ["id", "createdAt", "updatedAt"])
    def test_missing_required_field_fails(self, missing):
        fields = remote_fields()
        del fields[missing]

        with pytest.raises(FieldDecodeError):
            FieldCodec().decode(fields, remote_key="rec001")

    def test_optional_fields_get_defaults(self):
        fields = {"id": "p-2", "createdAt": CREATED_MS, "updatedAt": UPDATED_MS}
        record = FieldCodec().decode(fields)

        assert record.title == DEFAULT_TITLE == "untitled"
        assert record.content == ""
        assert record.tags == "[]"
        assert record.is_favorite is False
        assert record.last_used is None
        assert record.remote_key is None

    def test_non_text_id_fails(self):
        with pytest.raises(FieldDecodeError):
            FieldCodec().decode(remote_fields(id=42))

    def test_non_text_optional_field_uses_default(self):
        record = FieldCodec().decode(remote_fields(title=["rich", "text"]))
        assert record.title == "untitled"

    def test_boolean_timestamp_is_rejected(self):
        with pytest.raises(FieldDecodeError):
            FieldCodec().decode(remote_fields(updatedAt=True))

    def test_string_timestamp_is_rejected(self):
        with pytest.raises(FieldDecodeError):
            FieldCodec().decode(remote_fields(createdAt="1714564800000"))

    def test_out_of_range_timestamp_is_rejected(self):
        with pytest.raises(FieldDecodeError):
            FieldCodec().decode(remote_fields(updatedAt=10 ** 20))

    def test_bad_last_used_becomes_none(self):
        record = FieldCodec().decode(remote_fields(lastUsed="yesterday"))
        assert record.last_used is None

    def test_favorite_requires_exact_token(self):
        assert FieldCodec().decode(remote_fields(isFavorite="否")).is_favorite is False
        assert FieldCodec().decode(remote_fields(isFavorite=True)).is_favorite is False

    def test_round_trip_preserves_record(self):
        codec = FieldCodec()
        original = make_record(
            "p-3",
            updated=1234,
            created=7,
            is_favorite=True,
            last_used=at(5678),
            tags='["a", "b"]'
        )

        decoded = codec.decode(codec.encode(original), remote_key="rec042")

        assert decoded.remote_key == "rec042"
        assert decoded.without_remote_key() == original
