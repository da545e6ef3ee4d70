"""
Runtime settings for the book tracker service.

Values come from the environment. A `.env` file is loaded first, then
`.env.local` is overlaid without overriding anything already set.
"""
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()
load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env.local"), override=False)


class Settings(BaseModel):
    database_url: str = "sqlite:///./booktracker.db"
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    heartbeat_interval_sec: float = Field(default=15.0, gt=0)
    subscriber_buffer_size: int = Field(default=256, ge=1)
    worker_pool_size: int = Field(default=10, ge=1)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", ",".join(defaults.cors_origins))),
        heartbeat_interval_sec=float(os.getenv("HEARTBEAT_INTERVAL_SEC", defaults.heartbeat_interval_sec)),
        subscriber_buffer_size=int(os.getenv("SUBSCRIBER_BUFFER_SIZE", defaults.subscriber_buffer_size)),
        worker_pool_size=int(os.getenv("WORKER_POOL_SIZE", defaults.worker_pool_size)),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        host=os.getenv("HOST", defaults.host),
        port=int(os.getenv("PORT", defaults.port)),
    )


settings = load_settings()
