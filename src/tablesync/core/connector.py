"""Connector facade: configuration checks, connection test and sync."""

from typing import List, Optional

import aiohttp

from .local_store import LocalRecordStore
from .sync_engine import SyncEngine, SyncResult
from ..api_clients.models import TableField
from ..config.loader import ConfigLoader
from ..config.schema import SyncConfig
from ..config.settings import AppSettings, get_settings
from ..exceptions import RemoteAPIError, SyncEngineError
from ..utils.logging import get_logger, log_async_execution_time


class TableSyncConnector:
    """Entry point used by the CLI and host applications."""

    def __init__(
        self,
        config: SyncConfig,
        settings: Optional[AppSettings] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.config = config
        self.settings = settings or get_settings()
        self.engine = SyncEngine(config, remote_settings=self.settings.remote, session=session)
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_config_file(
        cls,
        loader: Optional[ConfigLoader] = None,
        settings: Optional[AppSettings] = None
    ) -> "TableSyncConnector":
        """Build a connector from the saved config.

        Raises:
            SyncEngineError: If nothing has been configured yet
            ConfigurationError: If the file cannot be read
        """
        loader = loader or ConfigLoader()
        config = loader.load()
        if config is None:
            raise SyncEngineError(
                f"Sync is not configured: no config file at {loader.file_path}"
            )
        return cls(config, settings=settings)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self.engine.close()

    @log_async_execution_time
    async def test_connection(self) -> str:
        """Fetch a token and the full table, returning a summary message.

        Raises:
            TableSyncError: If any step fails
        """
        try:
            token = await self.engine.token_provider.get_token(self.config.app_id, self.config.app_secret)
            listing = await self.engine.reader.list_all(token.value, self.config.table_ref)
        except RemoteAPIError as e:
            self.engine.discard_rejected_token(e)
            raise

        message = f"Connection test succeeded: found {len(listing.records)} records"
        if listing.skipped:
            message += f" ({len(listing.skipped)} rows could not be read)"

        self.logger.info("Connection test passed", records=len(listing.records), skipped=len(listing.skipped))
        return message

    async def table_fields(self) -> List[TableField]:
        """Return the remote table's columns."""
        try:
            token = await self.engine.token_provider.get_token(self.config.app_id, self.config.app_secret)
            return await self.engine.reader.list_fields(token.value, self.config.table_ref)
        except RemoteAPIError as e:
            self.engine.discard_rejected_token(e)
            raise

    async def sync(self, store: LocalRecordStore) -> SyncResult:
        """Run a sync unless it has been disabled in the config."""
        if not self.config.enabled:
            self.logger.warning("Sync requested while disabled", table_id=self.config.table_id)
            return SyncResult.failure("Sync is disabled in the configuration")
        return await self.engine.sync(store)
