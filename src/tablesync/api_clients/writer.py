"""Batched creation and update of remote records."""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp
from pydantic import ValidationError

from .base import BaseServiceClient
from .models import UpdatedRecords
from ..config.table_ref import TableRef
from ..core.field_codec import FieldCodec
from ..core.records import Record
from ..exceptions import SerializationError
from ..utils.logging import log_async_execution_time


def chunked(items: Sequence[Any], size: Optional[int]) -> List[Sequence[Any]]:
    """Split items into consecutive chunks; ``None`` means one chunk."""
    if not items:
        return []
    if not size:
        return [items]
    return [items[i:i + size] for i in range(0, len(items), size)]


class RecordWriter(BaseServiceClient):
    """Submits record creations and updates in batches.

    Neither operation is idempotent: resending a create after an ambiguous
    failure can duplicate rows on the remote side.
    """

    def __init__(
        self,
        base_url: str,
        codec: Optional[FieldCodec] = None,
        batch_size: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None
    ):
        """Initialize the writer.

        Args:
            base_url: API root
            codec: Field codec used to encode records
            batch_size: Maximum records per request; None sends one request
                per call. The service's own limit is external configuration.
            session: Optional shared aiohttp session
            timeout_seconds: Optional per-request timeout
        """
        super().__init__(base_url, session=session, timeout_seconds=timeout_seconds)
        self.codec = codec or FieldCodec()
        self.batch_size = batch_size

    @log_async_execution_time
    async def create_batch(self, token: str, table_ref: TableRef, records: Sequence[Record]) -> int:
        """Create records remotely.

        Returns:
            Number of records submitted; the response body is not inspected
            per record

        Raises:
            RemoteAPIError: If any batch returns a non-zero code
        """
        if not records:
            return 0

        path = f"{table_ref.records_path}/batch_create"
        submitted = 0

        for chunk in chunked(records, self.batch_size):
            payload = {"records": [{"fields": self.codec.encode(record)} for record in chunk]}
            await self._post_batch(path, token, payload)
            submitted += len(chunk)
            self.logger.debug("Create batch accepted", batch=len(chunk), submitted=submitted)

        self.logger.info("Created remote records", count=submitted, table_id=table_ref.table_id)
        return submitted

    @log_async_execution_time
    async def update_batch(
        self,
        token: str,
        table_ref: TableRef,
        pairs: Sequence[Tuple[str, Record]]
    ) -> int:
        """Update remote records addressed by their remote key.

        Returns:
            Number of records the service reports as updated

        Raises:
            RemoteAPIError: If any batch returns a non-zero code
            SerializationError: If the response records list is malformed
        """
        if not pairs:
            return 0

        path = f"{table_ref.records_path}/batch_update"
        updated = 0

        for chunk in chunked(pairs, self.batch_size):
            payload = {
                "records": [
                    {"record_id": remote_key, "fields": self.codec.encode(record)}
                    for remote_key, record in chunk
                ]
            }
            data = await self._post_batch(path, token, payload)
            if data is None:
                continue
            try:
                updated += len(UpdatedRecords(**data).records)
            except ValidationError as e:
                raise SerializationError(f"Unexpected update response from {path}: {e}") from e

        self.logger.info(
            "Updated remote records",
            requested=len(pairs),
            updated=updated,
            table_id=table_ref.table_id
        )
        return updated

    async def _post_batch(
        self,
        path: str,
        token: str,
        payload: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        data = await self._request_json("POST", path, token=token, payload=payload)
        envelope = self._parse_envelope(data, path)
        self._check_envelope(envelope, path)
        return envelope.data
