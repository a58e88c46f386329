"""Parsing of shared table URLs into (container, table) references.

Supported shapes::

    https://<tenant>.feishu.cn/base/<app_token>?table=<table_id>
    https://<tenant>.feishu.cn/wiki/<app_token>?table=<table_id>&view=<view_id>
"""

from dataclasses import dataclass
from urllib.parse import parse_qs

from ..exceptions import TableUrlParseError


CONTAINER_MARKERS = ("base", "wiki")


@dataclass(frozen=True)
class TableRef:
    """Location of a remote data table."""

    app_token: str
    table_id: str

    @property
    def records_path(self) -> str:
        return f"/bitable/v1/apps/{self.app_token}/tables/{self.table_id}/records"

    @property
    def fields_path(self) -> str:
        return f"/bitable/v1/apps/{self.app_token}/tables/{self.table_id}/fields"


def parse_table_url(url: str) -> TableRef:
    """Extract the container id and table id from a shared table URL.

    Raises:
        TableUrlParseError: If either part is missing
    """
    app_token = None
    table_id = None

    parts = url.strip().split("/")
    for index, part in enumerate(parts):
        if part in CONTAINER_MARKERS and index + 1 < len(parts):
            segment = parts[index + 1]
            app_token, _, query = segment.partition("?")
            if query:
                table_values = parse_qs(query.split("#", 1)[0]).get("table")
                if table_values:
                    table_id = table_values[0]
            break

    if not app_token:
        raise TableUrlParseError(
            "Could not extract the app token from the URL: "
            "it must contain a /base/ or /wiki/ path segment"
        )
    if not table_id:
        raise TableUrlParseError(
            "Could not extract the table id from the URL: "
            "it must contain a ?table= parameter"
        )

    return TableRef(app_token=app_token, table_id=table_id)
