from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    LOG_LEVEL: str = "info"

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    # Wall-clock length of one countdown second; tests shrink it.
    TIMER_TICK_SECONDS: float = 1.0
    MAX_TIMER_SECONDS: int = 3600

    MAX_TEXT_LENGTH: int = 2000
    MAX_AUDIO_BYTES: int = 5 * 1024 * 1024

    JUDGE_URL: str | None = None
    JUDGE_TIMEOUT_SECONDS: float = 120.0

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
