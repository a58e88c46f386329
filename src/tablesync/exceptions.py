"""Exception hierarchy shared by every layer of the sync engine."""

from typing import Optional


class TableSyncError(Exception):
    """Base class for all sync engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(TableSyncError):
    """Raised when configuration cannot be read, written or validated."""
    pass


class TableUrlParseError(TableSyncError):
    """Raised when a table URL does not name both a container and a table."""
    pass


class APIConnectionError(TableSyncError):
    """Raised when the remote service cannot be reached or answers garbage."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class SerializationError(TableSyncError):
    """Raised when a payload cannot be encoded or a response decoded."""
    pass


class RemoteAPIError(TableSyncError):
    """Raised when a response envelope carries a non-zero code."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        return self.message


class AuthenticationError(RemoteAPIError):
    """Raised when the tenant access token cannot be obtained."""
    pass


class FieldDecodeError(TableSyncError):
    """Raised when a single remote item cannot be turned into a Record."""
    pass


class LocalStoreError(TableSyncError):
    """Raised when the local store cannot produce its snapshot."""
    pass


class SyncEngineError(TableSyncError):
    """Raised when the engine is asked to run in an unusable state."""
    pass
