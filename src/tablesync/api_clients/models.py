"""Pydantic models for the remote service's response envelopes."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ApiEnvelope(BaseModel):
    """Common ``{code, msg, data}`` wrapper."""
    code: int
    msg: str = ""
    data: Optional[Dict[str, Any]] = None


class TenantTokenResponse(BaseModel):
    """Auth endpoint payload, which is not wrapped in ``data``."""
    tenant_access_token: str
    expire: int


class RecordsPage(BaseModel):
    """One page of the record list endpoint."""
    # Omitted by the service when the table is empty
    items: Optional[List[Any]] = None
    has_more: bool
    page_token: Optional[str] = None
    total: Optional[int] = None


class UpdatedRecords(BaseModel):
    """Batch update payload; its length is the authoritative update count."""
    records: List[Any] = Field(default_factory=list)


class TableField(BaseModel):
    """Column descriptor returned by the fields endpoint."""
    field_id: Optional[str] = None
    field_name: str
    type: Optional[int] = None
    ui_type: Optional[str] = None


class FieldsPage(BaseModel):
    """One page of the fields endpoint."""
    items: Optional[List[TableField]] = None
    has_more: bool = False
    page_token: Optional[str] = None
