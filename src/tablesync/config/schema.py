"""Configuration schema for the sync connection."""

from typing import Any, Dict

from pydantic import BaseModel, Field, validator

from .table_ref import TableRef, parse_table_url


MASKED_SECRET = "********"


class SyncConfig(BaseModel):
    """Credentials and table location for one remote table."""

    app_id: str = Field(..., description="Application id on the open platform")
    app_secret: str = Field(..., description="Application secret")
    base_url: str = Field(..., description="Shared URL of the remote table")
    app_token: str = Field(..., description="Container id parsed from base_url")
    table_id: str = Field(..., description="Table id parsed from base_url")
    enabled: bool = Field(default=True, description="Whether syncing is allowed")

    @validator('app_id', 'app_secret', 'base_url')
    def validate_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @classmethod
    def from_table_url(
        cls,
        app_id: str,
        app_secret: str,
        table_url: str,
        enabled: bool = True
    ) -> "SyncConfig":
        """Build a config, deriving the table reference from its URL.

        Raises:
            TableUrlParseError: If the URL lacks the container or table id
        """
        table_ref = parse_table_url(table_url)
        return cls(
            app_id=app_id,
            app_secret=app_secret,
            base_url=table_url,
            app_token=table_ref.app_token,
            table_id=table_ref.table_id,
            enabled=enabled
        )

    @property
    def table_ref(self) -> TableRef:
        return TableRef(app_token=self.app_token, table_id=self.table_id)

    def masked(self) -> "SyncConfig":
        """Copy of this config that is safe to display."""
        return self.copy(update={"app_secret": MASKED_SECRET})

    def to_dict(self) -> Dict[str, Any]:
        return self.dict()
