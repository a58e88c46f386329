"""Application configuration settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class RemoteServiceSettings(BaseSettings):
    """Remote table service (Feishu open platform) configuration."""

    api_base_url: str = Field(default="https://open.feishu.cn/open-apis")
    auth_path: str = Field(default="/auth/v3/tenant_access_token/internal")
    page_size: int = Field(default=500, ge=1)
    # None sends every create/update call as a single request
    batch_size: Optional[int] = Field(default=None, ge=1)
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    token_refresh_margin_seconds: int = Field(default=300, ge=0)
    favorite_true_token: str = Field(default="是")
    favorite_false_token: str = Field(default="否")

    class Config:
        env_prefix = "TABLESYNC_REMOTE_"


class DatabaseSettings(BaseSettings):
    """Local record database configuration."""

    url: str = Field(default="sqlite:///./data/records.db")

    class Config:
        env_prefix = "TABLESYNC_DB_"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="console")
    file_path: Optional[str] = Field(default="./logs/tablesync.log")

    class Config:
        env_prefix = "TABLESYNC_LOG_"


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = Field(default="tablesync")
    version: str = Field(default="0.1.0")
    config_dir: str = Field(default="./config")
    config_file_name: str = Field(default="sync_config.json")

    # Sub-settings
    remote: RemoteServiceSettings = RemoteServiceSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()

    class Config:
        env_prefix = "TABLESYNC_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = AppSettings()


def get_settings() -> AppSettings:
    """Get application settings."""
    return settings
