from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

__version__ = "0.1.0"


def _read_secret_file(path: str | None, fallback: str) -> str:
    if not path:
        return fallback
    value = Path(path).read_text(encoding="utf-8").strip()
    if not value:
        raise ValueError(f"Secret file at {path} is empty")
    return value


class Settings(BaseSettings):
    app_env: str = "dev"
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "resque"

    admin_api_key: str = "dev-admin-key"
    admin_api_key_file: str | None = None

    poll_interval_seconds: float = 5.0
    proctitle_enabled: bool = True

    log_level: str = "INFO"
    log_format: str = "console"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DELAYQ_")

    def model_post_init(self, __context: object) -> None:
        self.admin_api_key = _read_secret_file(self.admin_api_key_file, self.admin_api_key)


settings = Settings()
