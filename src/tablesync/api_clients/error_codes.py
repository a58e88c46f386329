"""Human-readable descriptions for the remote service's error codes."""

from typing import Dict, Optional


INVALID_APP_SECRET = 10014
INVALID_APP_ID = 10013
TENANT_TOKEN_INVALID = 99991663
TENANT_TOKEN_EXPIRED = 99991664
PERMISSION_DENIED = 99991672
APP_NO_TABLE_ACCESS = 1254032
BASE_NOT_FOUND = 1254051
TABLE_NOT_FOUND = 1254010

# Returned by the client itself when a success envelope has no data
EMPTY_DATA = -1

CURATED_MESSAGES: Dict[int, str] = {
    INVALID_APP_SECRET: (
        "Invalid app secret: check the App Secret configured for the application"
    ),
    INVALID_APP_ID: (
        "Invalid app id: check the App ID configured for the application"
    ),
    TENANT_TOKEN_INVALID: "Tenant access token is invalid",
    TENANT_TOKEN_EXPIRED: "Tenant access token has expired",
    PERMISSION_DENIED: (
        "Insufficient permission: grant the application a table read scope "
        "(bitable:app:readonly, bitable:app or base:record:retrieve)"
    ),
    APP_NO_TABLE_ACCESS: (
        "Application has no access to the table: add it to the workspace "
        "that owns the base and grant it access"
    ),
    BASE_NOT_FOUND: (
        "Table container not found or deleted: check the base token in the table URL"
    ),
    TABLE_NOT_FOUND: (
        "Data table not found: check the table parameter in the table URL"
    ),
}


def describe_error_code(code: int, msg: Optional[str] = None) -> str:
    """Return the curated message for a code, or a generic ``code - msg`` one."""
    curated = CURATED_MESSAGES.get(code)
    if curated:
        return curated
    return f"{code} - {msg or 'unknown error'}"
