"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./wallet_monitor.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    cron_secret: str = Field(default="default-cron-secret", min_length=8)


class PollerSettings(BaseModel):
    enabled: bool = True
    interval_seconds: float = Field(default=2.0, gt=0)
    batch_size: int = Field(default=5, ge=1)
    fetch_timeout: float = Field(default=10.0, gt=0)
    refresh_seconds: float = Field(default=300.0, gt=0)


class BroadcastSettings(BaseModel):
    heartbeat_interval: float = Field(default=30.0, gt=0)
    stale_grace: float = Field(default=15.0, ge=0)
    queue_size: int = Field(default=100, ge=1)


class WebhookSettings(BaseModel):
    log_payloads: bool = True


class TelegramSettings(BaseModel):
    api_base: str = "https://api.telegram.org"
    timeout: float = 10.0
    timezone: str = "Asia/Bangkok"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "Wallet Monitor"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    poller: PollerSettings = PollerSettings()
    broadcast: BroadcastSettings = BroadcastSettings()
    webhook: WebhookSettings = WebhookSettings()
    telegram: TelegramSettings = TelegramSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def cron_secret(self) -> str:
        return self.security.cron_secret


@lru_cache()
def get_settings() -> Settings:
    return Settings()
