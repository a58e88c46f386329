"""Shared fixtures: record factory and an in-process fake table service."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
import structlog
from aiohttp import web
from aiohttp.test_utils import TestServer

from tablesync.config.schema import SyncConfig
from tablesync.config.settings import RemoteServiceSettings
from tablesync.core.records import Record


APP_ID = "cli_test_app"
APP_SECRET = "test-secret-value"
APP_TOKEN = "bascnTestBase"
TABLE_ID = "tblTestTable"
TABLE_URL = f"https://example.feishu.cn/base/{APP_TOKEN}?table={TABLE_ID}&view=vewTest"

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    # Send structlog output through stdlib logging so stdout stays clean
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def at(offset_ms: int) -> datetime:
    """A millisecond-precision UTC timestamp relative to BASE_TIME."""
    return BASE_TIME + timedelta(milliseconds=offset_ms)


def make_record(
    record_id: str,
    updated: int = 0,
    created: int = 0,
    remote_key: Optional[str] = None,
    **overrides
) -> Record:
    values = dict(
        id=record_id,
        title=f"Prompt {record_id}",
        content=f"Content of {record_id}",
        tags='["test"]',
        is_favorite=False,
        created_at=at(created),
        updated_at=at(updated),
        last_used=None,
        remote_key=remote_key,
    )
    values.update(overrides)
    return Record(**values)


class FakeTableService:
    """Minimal stand-in for the auth and bitable record endpoints."""

    ROOT = "/open-apis"

    def __init__(self):
        self.app_id = APP_ID
        self.app_secret = APP_SECRET
        self.app_token = APP_TOKEN
        self.table_id = TABLE_ID
        self.token_value = "t-fake-tenant-token"
        self.expire = 7200

        # Stored rows as the service returns them: {"record_id", "fields"}
        self.rows: List[Dict[str, Any]] = []
        self.table_fields: List[Dict[str, Any]] = [
            {"field_id": "fld1", "field_name": "id", "type": 1, "ui_type": "Text"},
            {"field_id": "fld2", "field_name": "title", "type": 1, "ui_type": "Text"},
            {"field_id": "fld3", "field_name": "isFavorite", "type": 3, "ui_type": "SingleSelect"},
        ]

        self.token_requests = 0
        self.list_requests: List[Dict[str, str]] = []
        self.create_requests: List[Dict[str, Any]] = []
        self.update_requests: List[Dict[str, Any]] = []

        # Per-endpoint overrides: (code, msg) errors or verbatim bodies
        self.errors: Dict[str, Tuple[int, str]] = {}
        self.bodies: Dict[str, Any] = {}
        self.raw: Dict[str, Tuple[int, str]] = {}

        self.base_url: Optional[str] = None
        self._next_key = 1

    def add_row(self, fields: Dict[str, Any], record_id: Optional[str] = None) -> str:
        record_id = record_id or self._new_key()
        self.rows.append({"record_id": record_id, "fields": fields})
        return record_id

    def row_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows:
            if row["fields"].get("id") == record_id:
                return row
        return None

    def build_app(self) -> web.Application:
        app = web.Application()
        table = self.ROOT + "/bitable/v1/apps/{app_token}/tables/{table_id}"
        app.router.add_post(self.ROOT + "/auth/v3/tenant_access_token/internal", self.handle_auth)
        app.router.add_get(table + "/records", self.handle_list)
        app.router.add_post(table + "/records/batch_create", self.handle_create)
        app.router.add_post(table + "/records/batch_update", self.handle_update)
        app.router.add_get(table + "/fields", self.handle_fields)
        return app

    def _new_key(self) -> str:
        key = f"rec{self._next_key:04d}"
        self._next_key += 1
        return key

    def _override(self, endpoint: str) -> Optional[web.Response]:
        if endpoint in self.raw:
            status, text = self.raw[endpoint]
            return web.Response(status=status, text=text, content_type="text/html")
        if endpoint in self.errors:
            code, msg = self.errors[endpoint]
            return web.json_response({"code": code, "msg": msg})
        if endpoint in self.bodies:
            return web.json_response(self.bodies[endpoint])
        return None

    def _reject(self, endpoint: str, request: web.Request) -> Optional[web.Response]:
        override = self._override(endpoint)
        if override is not None:
            return override
        return self._check_table(request)

    def _check_table(self, request: web.Request) -> Optional[web.Response]:
        if request.headers.get("Authorization") != f"Bearer {self.token_value}":
            return web.json_response({"code": 99991663, "msg": "Invalid access token"})
        if request.match_info["app_token"] != self.app_token:
            return web.json_response({"code": 1254051, "msg": "NOTEXIST"})
        if request.match_info["table_id"] != self.table_id:
            return web.json_response({"code": 1254010, "msg": "TableIdNotFound"})
        return None

    async def handle_auth(self, request: web.Request) -> web.Response:
        self.token_requests += 1
        override = self._override("auth")
        if override is not None:
            return override

        body = await request.json()
        if body.get("app_id") != self.app_id:
            return web.json_response({"code": 10013, "msg": "app id invalid"})
        if body.get("app_secret") != self.app_secret:
            return web.json_response({"code": 10014, "msg": "app secret invalid"})

        return web.json_response({
            "code": 0,
            "msg": "ok",
            "tenant_access_token": self.token_value,
            "expire": self.expire
        })

    async def handle_list(self, request: web.Request) -> web.Response:
        self.list_requests.append(dict(request.query))
        override = self._reject("list", request)
        if override is not None:
            return override

        page_size = int(request.query.get("page_size", "500"))
        offset = int(request.query.get("page_token", "0"))
        items = self.rows[offset:offset + page_size]
        has_more = offset + page_size < len(self.rows)

        data: Dict[str, Any] = {"has_more": has_more, "total": len(self.rows)}
        if items:
            data["items"] = items
        if has_more:
            data["page_token"] = str(offset + page_size)
        return web.json_response({"code": 0, "msg": "success", "data": data})

    async def handle_create(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.create_requests.append(body)
        override = self._reject("create", request)
        if override is not None:
            return override

        created = []
        for item in body["records"]:
            record_id = self.add_row(dict(item["fields"]))
            created.append({"record_id": record_id, "fields": item["fields"]})
        return web.json_response({"code": 0, "msg": "success", "data": {"records": created}})

    async def handle_update(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.update_requests.append(body)
        override = self._reject("update", request)
        if override is not None:
            return override

        updated = []
        for item in body["records"]:
            for row in self.rows:
                if row["record_id"] == item["record_id"]:
                    row["fields"].update(item["fields"])
                    updated.append(row)
        return web.json_response({"code": 0, "msg": "success", "data": {"records": updated}})

    async def handle_fields(self, request: web.Request) -> web.Response:
        override = self._reject("fields", request)
        if override is not None:
            return override
        return web.json_response({
            "code": 0,
            "msg": "success",
            "data": {"items": self.table_fields, "has_more": False, "total": len(self.table_fields)}
        })


@pytest_asyncio.fixture
async def fake_service():
    """Start the fake service on a local port."""
    service = FakeTableService()
    server = TestServer(service.build_app())
    await server.start_server()
    service.base_url = str(server.make_url(FakeTableService.ROOT))

    yield service

    await server.close()


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig.from_table_url(app_id=APP_ID, app_secret=APP_SECRET, table_url=TABLE_URL)


@pytest.fixture
def remote_settings(fake_service) -> RemoteServiceSettings:
    return RemoteServiceSettings(api_base_url=fake_service.base_url)
