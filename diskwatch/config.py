import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Watch-list, comma separated (e.g. "/dev/sda1,/dev/nvme0n1p2")
    FILE_SYSTEMS: str = ""
    THRESHOLD: float = 1.0  # Alert when use% >= THRESHOLD

    # Webhook
    API_ENDPOINT: str = ""
    WEBHOOK_TIMEOUT: float = Field(default=10.0, gt=0)

    # Loop settings (seconds)
    TRIGGER_INTERVAL: int = Field(default=60, ge=0)  # Wait after a quiet cycle
    WARNING_INTERVAL: int = Field(default=3600, ge=0)  # Wait after a warning was sent

    DF_COMMAND: str = "df -h"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @property
    def watched_filesystems(self) -> list[str]:
        return [fs.strip() for fs in self.FILE_SYSTEMS.split(',') if fs.strip()]


def load_settings() -> Settings:
    """读取环境变量（及 .env），配置错误时抛出 ValidationError"""
    return Settings()
