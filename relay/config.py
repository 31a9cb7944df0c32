"""
Relay configuration loaded from the environment
"""

import os
import re
from typing import Optional, Pattern

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from .constants import (
    DEFAULT_ALLOWED_ORIGIN_HOST,
    DEFAULT_DEV_WS_PORT,
    DEFAULT_HTTP_PORT,
    DEFAULT_KEEPALIVE_INTERVAL,
    DEFAULT_PASSWORD,
    LOG_LEVEL,
    ORIGIN_PATTERN_TEMPLATE,
)

# Ensure environment variables from a .env file are loaded before accessing them.
load_dotenv()


class Settings(BaseModel):
    RELAY_PASSWORD: str = os.getenv("RELAY_PASSWORD", DEFAULT_PASSWORD)
    ALLOWED_ORIGIN_HOST: str = os.getenv("ALLOWED_ORIGIN_HOST", DEFAULT_ALLOWED_ORIGIN_HOST)
    ALLOWED_ORIGIN_PATTERN: Optional[str] = os.getenv("ALLOWED_ORIGIN_PATTERN") or None
    KEEPALIVE_INTERVAL: float = float(os.getenv("KEEPALIVE_INTERVAL", str(DEFAULT_KEEPALIVE_INTERVAL)))
    APP_ENV: str = os.getenv("APP_ENV", "development")
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", str(DEFAULT_HTTP_PORT)))
    DEV_WS_PORT: int = int(os.getenv("DEV_WS_PORT", str(DEFAULT_DEV_WS_PORT)))
    SSL_KEYFILE: Optional[str] = os.getenv("SSL_KEYFILE") or None
    SSL_CERTFILE: Optional[str] = os.getenv("SSL_CERTFILE") or None
    STATIC_DIR: str = os.getenv("STATIC_DIR", "public")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", LOG_LEVEL)

    @field_validator("APP_ENV")
    @classmethod
    def _check_env(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("production", "development"):
            raise ValueError("APP_ENV must be 'production' or 'development'")
        return value

    @field_validator("KEEPALIVE_INTERVAL")
    @classmethod
    def _check_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("KEEPALIVE_INTERVAL must be positive")
        return value

    @field_validator("ALLOWED_ORIGIN_PATTERN")
    @classmethod
    def _check_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"ALLOWED_ORIGIN_PATTERN is not a valid regex: {exc}") from exc
        return value

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def origin_pattern(self) -> str:
        """Effective origin pattern: explicit override, else built from the host"""
        if self.ALLOWED_ORIGIN_PATTERN:
            return self.ALLOWED_ORIGIN_PATTERN
        return ORIGIN_PATTERN_TEMPLATE.format(host=re.escape(self.ALLOWED_ORIGIN_HOST))

    @property
    def origin_regex(self) -> Pattern[str]:
        return re.compile(self.origin_pattern, re.IGNORECASE)


settings = Settings()
