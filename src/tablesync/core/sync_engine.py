"""Core sync engine: sequences one bidirectional sync run."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from .field_codec import FieldCodec
from .local_store import LocalRecordStore
from .planner import plan as compute_plan
from .records import Record, SyncPlan
from ..api_clients.reader import ListResult, RecordReader
from ..api_clients.writer import RecordWriter
from ..auth.token_provider import RemoteToken, TokenProvider
from ..config.schema import SyncConfig
from ..config.settings import RemoteServiceSettings, get_settings
from ..api_clients.error_codes import TENANT_TOKEN_EXPIRED, TENANT_TOKEN_INVALID
from ..exceptions import LocalStoreError, RemoteAPIError, TableSyncError
from ..utils.logging import get_logger, log_async_execution_time


# Codes with which the service rejects a token it issued
REJECTED_TOKEN_CODES = (TENANT_TOKEN_INVALID, TENANT_TOKEN_EXPIRED)


@dataclass
class SyncResult:
    """Outcome of a sync run, always returned instead of raised."""

    success: bool
    message: str
    local_created: int = 0
    local_updated: int = 0
    remote_created: int = 0
    remote_updated: int = 0
    skipped_remote_items: int = 0
    skipped_updates: List[str] = field(default_factory=list)
    sync_duration: Optional[float] = None

    @property
    def total_processed(self) -> int:
        """Sum of the four action counts."""
        return self.local_created + self.local_updated + self.remote_created + self.remote_updated

    @classmethod
    def failure(cls, message: str) -> "SyncResult":
        return cls(success=False, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "local_created": self.local_created,
            "local_updated": self.local_updated,
            "remote_created": self.remote_created,
            "remote_updated": self.remote_updated,
            "total_processed": self.total_processed,
            "skipped_remote_items": self.skipped_remote_items,
            "skipped_updates": list(self.skipped_updates),
            "sync_duration": self.sync_duration,
        }


class SyncEngine:
    """Runs token → fetch → snapshot → plan → remote writes → local writes.

    Stages raise TableSyncError subclasses; ``sync`` is the only place where
    errors are turned into a failed SyncResult. There is no retry and no
    locking: two runs started together may race on the local store.
    """

    def __init__(
        self,
        config: SyncConfig,
        remote_settings: Optional[RemoteServiceSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
        token_provider: Optional[TokenProvider] = None,
        reader: Optional[RecordReader] = None,
        writer: Optional[RecordWriter] = None
    ):
        """Initialize sync engine.

        Args:
            config: Credentials and table location
            remote_settings: Remote service settings; app settings when None
            session: Optional aiohttp session shared by all clients
            token_provider: Override for the token client
            reader: Override for the record reader
            writer: Override for the record writer
        """
        self.config = config
        self.remote_settings = remote_settings or get_settings().remote
        self.logger = get_logger(self.__class__.__name__)

        rs = self.remote_settings
        codec = FieldCodec(
            favorite_true=rs.favorite_true_token,
            favorite_false=rs.favorite_false_token
        )

        self.token_provider = token_provider or TokenProvider(
            rs.api_base_url,
            auth_path=rs.auth_path,
            refresh_margin_seconds=rs.token_refresh_margin_seconds,
            session=session,
            timeout_seconds=rs.request_timeout_seconds
        )
        self.reader = reader or RecordReader(
            rs.api_base_url,
            codec=codec,
            page_size=rs.page_size,
            session=session,
            timeout_seconds=rs.request_timeout_seconds
        )
        self.writer = writer or RecordWriter(
            rs.api_base_url,
            codec=codec,
            batch_size=rs.batch_size,
            session=session,
            timeout_seconds=rs.request_timeout_seconds
        )

        self.logger.info(
            "Sync engine initialized",
            app_token=config.app_token,
            table_id=config.table_id,
            batch_size=rs.batch_size
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        for client in (self.token_provider, self.reader, self.writer):
            await client.close()

    @log_async_execution_time
    async def sync(self, store: LocalRecordStore) -> SyncResult:
        """Run one sync and report the outcome.

        Never raises: any failure yields ``SyncResult(success=False)`` with a
        displayable message.
        """
        start_time = time.monotonic()
        self.logger.info("Starting sync", table_id=self.config.table_id)

        try:
            result = await self._run(store)
        except TableSyncError as e:
            self.logger.error("Sync failed", error=str(e), error_type=type(e).__name__)
            self.discard_rejected_token(e)
            result = SyncResult.failure(f"Sync failed: {e}")
        except Exception as e:
            self.logger.exception("Sync failed with unexpected error", error=str(e))
            result = SyncResult.failure(f"Unexpected error during sync: {e}")

        result.sync_duration = time.monotonic() - start_time

        self.logger.info(
            "Sync finished",
            success=result.success,
            local_created=result.local_created,
            local_updated=result.local_updated,
            remote_created=result.remote_created,
            remote_updated=result.remote_updated,
            total_processed=result.total_processed,
            duration=f"{result.sync_duration:.2f}s"
        )
        return result

    def discard_rejected_token(self, error: TableSyncError) -> None:
        """Drop the cached token if the service refused it, so the next call re-authenticates."""
        if isinstance(error, RemoteAPIError) and error.code in REJECTED_TOKEN_CODES:
            self.logger.warning("Cached tenant access token rejected", code=error.code)
            self.token_provider.invalidate()

    async def _run(self, store: LocalRecordStore) -> SyncResult:
        token = await self._acquire_token()
        remote = await self._fetch_remote(token)
        local = self._local_snapshot(store)
        sync_plan = compute_plan(local, remote.records)

        result = SyncResult(
            success=True,
            message="Sync completed successfully",
            skipped_remote_items=len(remote.skipped),
            skipped_updates=list(sync_plan.skipped_updates)
        )

        await self._apply_remote_writes(token, sync_plan, result)
        self._apply_local_writes(store, sync_plan, result)
        return result

    async def _acquire_token(self) -> RemoteToken:
        return await self.token_provider.get_token(self.config.app_id, self.config.app_secret)

    async def _fetch_remote(self, token: RemoteToken) -> ListResult:
        return await self.reader.list_all(token.value, self.config.table_ref)

    def _local_snapshot(self, store: LocalRecordStore) -> List[Record]:
        try:
            records = store.snapshot()
        except Exception as e:
            raise LocalStoreError(f"Could not read local records: {e}") from e
        self.logger.info("Local snapshot obtained", records=len(records))
        return records

    async def _apply_remote_writes(self, token: RemoteToken, sync_plan: SyncPlan, result: SyncResult) -> None:
        table_ref = self.config.table_ref
        if sync_plan.to_create_remote:
            result.remote_created = await self.writer.create_batch(
                token.value, table_ref, sync_plan.to_create_remote
            )
        if sync_plan.to_update_remote:
            result.remote_updated = await self.writer.update_batch(
                token.value, table_ref, sync_plan.to_update_remote
            )

    def _apply_local_writes(self, store: LocalRecordStore, sync_plan: SyncPlan, result: SyncResult) -> None:
        # Counts come from the plan; the store may persist asynchronously
        result.local_created = len(sync_plan.to_create_local)
        result.local_updated = len(sync_plan.to_update_local)

        if sync_plan.to_create_local:
            try:
                store.apply_creates(sync_plan.to_create_local)
            except Exception as e:
                self.logger.error("Local create failed", count=result.local_created, error=str(e))

        if sync_plan.to_update_local:
            try:
                store.apply_updates(sync_plan.to_update_local)
            except Exception as e:
                self.logger.error("Local update failed", count=result.local_updated, error=str(e))
