"""Base HTTP client shared by the token, reader and writer clients."""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from .error_codes import EMPTY_DATA, describe_error_code
from .models import ApiEnvelope
from ..exceptions import APIConnectionError, RemoteAPIError, SerializationError
from ..utils.logging import get_logger


class BaseServiceClient:
    """Owns (or borrows) an aiohttp session and speaks the JSON envelope protocol."""

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None
    ):
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``https://open.feishu.cn/open-apis``
            session: Shared session; when omitted the client creates and
                closes its own
            timeout_seconds: Total timeout per request; aiohttp's default
                applies when None
        """
        self.base_url = base_url.rstrip('/')
        self.session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds else None
        self.logger = get_logger(self.__class__.__name__)

    async def __aenter__(self):
        """Async context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request_json(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body.

        The body is decoded regardless of HTTP status, because the service
        reports most failures as a JSON envelope with a non-zero code.

        Raises:
            APIConnectionError: On transport failure, or a non-JSON body
                on a non-2xx status
            SerializationError: If a 2xx body is not a JSON object
        """
        session = self._ensure_session()
        url = self._url(path)
        kwargs: Dict[str, Any] = {"headers": self._auth_headers(token)}
        if params:
            kwargs["params"] = params
        if payload is not None:
            kwargs["json"] = payload
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            async with session.request(method, url, **kwargs) as response:
                status = response.status
                body = await response.text()
        except asyncio.TimeoutError as e:
            raise APIConnectionError(f"Request to {path} timed out") from e
        except aiohttp.ClientError as e:
            raise APIConnectionError(f"Network error calling {path}: {e}") from e

        self.logger.debug("Received response", method=method, path=path, status=status)

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            if status >= 400:
                raise APIConnectionError(
                    f"Request to {path} failed: {status} - {body[:200]}",
                    status=status
                ) from e
            raise SerializationError(f"Response from {path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SerializationError(f"Response from {path} is not a JSON object")
        return data

    def _parse_envelope(self, data: Dict[str, Any], path: str) -> ApiEnvelope:
        try:
            return ApiEnvelope(**data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected response shape from {path}: {e}") from e

    def _check_envelope(self, envelope: ApiEnvelope, path: str) -> None:
        """Raise RemoteAPIError for a non-zero code."""
        if envelope.code != 0:
            message = describe_error_code(envelope.code, envelope.msg)
            self.logger.error(
                "Remote service returned an error",
                path=path,
                code=envelope.code,
                msg=envelope.msg
            )
            raise RemoteAPIError(envelope.code, message)

    def _require_data(self, envelope: ApiEnvelope, path: str) -> Dict[str, Any]:
        if envelope.data is None:
            raise RemoteAPIError(EMPTY_DATA, f"Response from {path} has no data")
        return envelope.data
