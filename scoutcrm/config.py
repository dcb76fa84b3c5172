# scoutcrm/config.py
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    secret_key: str
    env: Literal["dev", "stage", "prod"]
    debug: bool = False
    log_level: str = "INFO"
    access_log: bool = True
    sql_echo: bool = False
    auto_init_db: bool = True

    # External player-data service (Transfermarkt-compatible JSON API)
    tm_api_base: str = "https://transfermarkt-api.fly.dev"
    tm_timeout_seconds: float = 12.0

    # Pauses between external calls, in milliseconds
    tm_search_delay_ms: int = 1200
    tm_profile_delay_ms: int = 800
    tm_error_delay_ms: int = 1500
    tm_single_delay_ms: int = 400

    @field_validator("tm_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_dev(self) -> bool:
        return self.env == "dev" or self.debug is True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
