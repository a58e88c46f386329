"""Tenant access token acquisition and caching.

Exchanges the application's long-lived id/secret for a short-lived bearer
token. The token is cached on the provider and reused until it is within
``refresh_margin_seconds`` of expiry.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import aiohttp
from pydantic import ValidationError

from ..api_clients.base import BaseServiceClient
from ..api_clients.error_codes import describe_error_code
from ..api_clients.models import TenantTokenResponse
from ..exceptions import AuthenticationError, SerializationError
from ..utils.logging import mask_secret


DEFAULT_AUTH_PATH = "/auth/v3/tenant_access_token/internal"


@dataclass(frozen=True)
class RemoteToken:
    """Bearer token plus its absolute expiry."""

    value: str
    expires_at: datetime
    app_id: str = ""

    def is_expired(self, margin_seconds: int = 0, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at - timedelta(seconds=margin_seconds)


class TokenProvider(BaseServiceClient):
    """Obtains tenant access tokens from the auth endpoint."""

    def __init__(
        self,
        base_url: str,
        auth_path: str = DEFAULT_AUTH_PATH,
        refresh_margin_seconds: int = 300,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None
    ):
        super().__init__(base_url, session=session, timeout_seconds=timeout_seconds)
        self.auth_path = auth_path
        self.refresh_margin_seconds = refresh_margin_seconds
        self._cached: Optional[RemoteToken] = None

    async def acquire(self, app_id: str, app_secret: str) -> RemoteToken:
        """Request a fresh token, bypassing the cache.

        The body is checked for a non-zero ``code`` before it is read as a
        token payload, since error and success responses share one shape.

        Raises:
            AuthenticationError: The service rejected the credentials
            SerializationError: The body is not a token payload
            APIConnectionError: Transport failure
        """
        self.logger.info("Requesting tenant access token", app_id=mask_secret(app_id))

        data = await self._request_json(
            "POST",
            self.auth_path,
            payload={"app_id": app_id, "app_secret": app_secret}
        )

        code = data.get("code")
        if isinstance(code, int) and code != 0:
            msg = data.get("msg") if isinstance(data.get("msg"), str) else None
            self.logger.error("Token request rejected", code=code, msg=msg)
            raise AuthenticationError(code, describe_error_code(code, msg))

        try:
            payload = TenantTokenResponse(**data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected token response: {e}") from e

        token = RemoteToken(
            value=payload.tenant_access_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=payload.expire),
            app_id=app_id
        )

        self.logger.info("Tenant access token obtained", expires_in=payload.expire)
        return token

    async def get_token(self, app_id: str, app_secret: str) -> RemoteToken:
        """Return the cached token, acquiring a new one when needed."""
        cached = self._cached
        if cached and cached.app_id == app_id and not cached.is_expired(self.refresh_margin_seconds):
            self.logger.debug("Using cached tenant access token")
            return cached

        self._cached = await self.acquire(app_id, app_secret)
        return self._cached

    def invalidate(self) -> None:
        """Forget the cached token."""
        self._cached = None
