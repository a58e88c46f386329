"""Paginated retrieval of the full remote record set."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from .base import BaseServiceClient
from .models import FieldsPage, RecordsPage, TableField
from ..config.table_ref import TableRef
from ..core.field_codec import FieldCodec
from ..core.records import Record
from ..exceptions import FieldDecodeError, SerializationError
from ..utils.logging import log_async_execution_time


DEFAULT_PAGE_SIZE = 500


@dataclass
class SkippedItem:
    """A remote item that could not be decoded."""

    remote_key: Optional[str]
    reason: str
    page: int


@dataclass
class ListResult:
    """Decoded records plus the items that were dropped on the way."""

    records: List[Record] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    pages: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


class RecordReader(BaseServiceClient):
    """Reads every record of a remote table, one page at a time."""

    def __init__(
        self,
        base_url: str,
        codec: Optional[FieldCodec] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None
    ):
        super().__init__(base_url, session=session, timeout_seconds=timeout_seconds)
        self.codec = codec or FieldCodec()
        self.page_size = page_size

    @log_async_execution_time
    async def list_all(self, token: str, table_ref: TableRef) -> ListResult:
        """Fetch all pages and decode every item.

        An item that fails to decode is logged and recorded in
        ``ListResult.skipped``; the remaining items and pages are still read.

        Raises:
            RemoteAPIError: Non-zero code or a response without data
            SerializationError: Malformed page
            APIConnectionError: Transport failure
        """
        path = table_ref.records_path
        result = ListResult()
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"page_size": self.page_size}
            if page_token:
                params["page_token"] = page_token

            page = await self._fetch_page(path, token, params)
            result.pages += 1

            for item in page.items or []:
                self._decode_item(item, result)

            self.logger.debug(
                "Fetched records page",
                page=result.pages,
                items=len(page.items or []),
                has_more=page.has_more
            )

            if not page.has_more:
                break
            if not page.page_token:
                raise SerializationError(
                    f"Page {result.pages} of {path} reports more data but no page_token"
                )
            page_token = page.page_token

        self.logger.info(
            "Fetched remote records",
            app_token=table_ref.app_token,
            table_id=table_ref.table_id,
            records=len(result.records),
            skipped=len(result.skipped),
            pages=result.pages
        )
        return result

    async def list_fields(self, token: str, table_ref: TableRef) -> List[TableField]:
        """Return the table's column descriptors, for diagnosing field mismatches."""
        path = table_ref.fields_path
        fields: List[TableField] = []
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"page_size": 100}
            if page_token:
                params["page_token"] = page_token

            data = await self._get_data(path, token, params)
            try:
                page = FieldsPage(**data)
            except ValidationError as e:
                raise SerializationError(f"Unexpected fields page from {path}: {e}") from e

            fields.extend(page.items or [])
            if not page.has_more or not page.page_token:
                break
            page_token = page.page_token

        self.logger.info("Fetched table fields", table_id=table_ref.table_id, fields=len(fields))
        return fields

    async def _get_data(self, path: str, token: str, params: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request_json("GET", path, token=token, params=params)
        envelope = self._parse_envelope(data, path)
        self._check_envelope(envelope, path)
        return self._require_data(envelope, path)

    async def _fetch_page(self, path: str, token: str, params: Dict[str, Any]) -> RecordsPage:
        data = await self._get_data(path, token, params)
        try:
            return RecordsPage(**data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected records page from {path}: {e}") from e

    def _decode_item(self, item: Any, result: ListResult) -> None:
        remote_key = item.get("record_id") if isinstance(item, dict) else None

        try:
            if not isinstance(remote_key, str) or not remote_key:
                raise FieldDecodeError("Item has no record_id")
            if "fields" not in item:
                raise FieldDecodeError(f"Record {remote_key} has no fields object")
            result.records.append(self.codec.decode(item["fields"], remote_key=remote_key))
        except FieldDecodeError as e:
            self.logger.warning(
                "Skipping remote record that could not be decoded",
                remote_key=remote_key,
                page=result.pages,
                reason=str(e)
            )
            result.skipped.append(
                SkippedItem(
                    remote_key=remote_key if isinstance(remote_key, str) else None,
                    reason=str(e),
                    page=result.pages
                )
            )
