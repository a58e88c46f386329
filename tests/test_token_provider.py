"""Tests for tenant access token acquisition."""

from datetime import datetime, timedelta, timezone

import pytest

from tablesync.auth import TokenProvider, RemoteToken
from tablesync.exceptions import (
    AuthenticationError,
    APIConnectionError,
    SerializationError,
)

from conftest import APP_ID, APP_SECRET


class TestRemoteToken:
    """Expiry arithmetic."""

    def test_expiry_with_margin(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        token = RemoteToken(value="t", expires_at=now + timedelta(seconds=600))

        assert not token.is_expired(now=now)
        assert not token.is_expired(margin_seconds=300, now=now)
        assert token.is_expired(margin_seconds=600, now=now)
        assert token.is_expired(now=now + timedelta(seconds=601))


class TestTokenProvider:
    """Token requests against the fake service."""

    @pytest.mark.asyncio
    async def test_acquire_success(self, fake_service):
        async with TokenProvider(fake_service.base_url) as provider:
            token = await provider.acquire(APP_ID, APP_SECRET)

        assert token.value == fake_service.token_value
        assert token.app_id == APP_ID
        remaining = token.expires_at - datetime.now(timezone.utc)
        assert timedelta(seconds=7100) < remaining <= timedelta(seconds=7200)

    @pytest.mark.asyncio
    async def test_invalid_secret(self, fake_service):
        async with TokenProvider(fake_service.base_url) as provider:
            with pytest.raises(AuthenticationError) as exc_info:
                await provider.acquire(APP_ID, "wrong-secret")

        assert exc_info.value.code == 10014
        assert "invalid app secret" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_invalid_app_id(self, fake_service):
        async with TokenProvider(fake_service.base_url) as provider:
            with pytest.raises(AuthenticationError) as exc_info:
                await provider.acquire("cli_unknown", APP_SECRET)

        assert exc_info.value.code == 10013
        assert "invalid app id" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_unknown_code_uses_generic_message(self, fake_service):
        fake_service.errors["auth"] = (12345, "something odd")

        async with TokenProvider(fake_service.base_url) as provider:
            with pytest.raises(AuthenticationError, match="12345 - something odd"):
                await provider.acquire(APP_ID, APP_SECRET)

    @pytest.mark.asyncio
    async def test_success_code_without_token_is_malformed(self, fake_service):
        fake_service.bodies["auth"] = {"code": 0, "msg": "ok"}

        async with TokenProvider(fake_service.base_url) as provider:
            with pytest.raises(SerializationError):
                await provider.acquire(APP_ID, APP_SECRET)

    @pytest.mark.asyncio
    async def test_html_error_page(self, fake_service):
        fake_service.raw["auth"] = (502, "<html>Bad gateway</html>")

        async with TokenProvider(fake_service.base_url) as provider:
            with pytest.raises(APIConnectionError) as exc_info:
                await provider.acquire(APP_ID, APP_SECRET)

        assert exc_info.value.status == 502

    @pytest.mark.asyncio
    async def test_get_token_reuses_cached_token(self, fake_service):
        async with TokenProvider(fake_service.base_url) as provider:
            first = await provider.get_token(APP_ID, APP_SECRET)
            second = await provider.get_token(APP_ID, APP_SECRET)

        assert first is second
        assert fake_service.token_requests == 1

    @pytest.mark.asyncio
    async def test_get_token_refreshes_inside_margin(self, fake_service):
        fake_service.expire = 60

        async with TokenProvider(fake_service.base_url, refresh_margin_seconds=300) as provider:
            await provider.get_token(APP_ID, APP_SECRET)
            await provider.get_token(APP_ID, APP_SECRET)

        assert fake_service.token_requests == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_new_request(self, fake_service):
        async with TokenProvider(fake_service.base_url) as provider:
            await provider.get_token(APP_ID, APP_SECRET)
            provider.invalidate()
            await provider.get_token(APP_ID, APP_SECRET)

        assert fake_service.token_requests == 2

    @pytest.mark.asyncio
    async def test_unreachable_service(self):
        async with TokenProvider("http://127.0.0.1:1/open-apis") as provider:
            with pytest.raises(APIConnectionError):
                await provider.acquire(APP_ID, APP_SECRET)
