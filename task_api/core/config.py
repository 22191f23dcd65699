# task_api/core/config.py
from functools import lru_cache
from typing import Optional
import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # app
    app_env: str = Field("development", alias="APP_ENV")
    app_version: str = Field("1.0.0", alias="APP_VERSION")

    # unset: INFO in production, DEBUG elsewhere
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # http server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    cors_allow_origins: str = Field("*", alias="CORS_ALLOW_ORIGINS")

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def resolved_log_level(self) -> int:
        if self.log_level:
            level = logging.getLevelName(self.log_level.strip().upper())
            if isinstance(level, int):
                return level
            raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {self.log_level!r}")
        return logging.INFO if self.is_production else logging.DEBUG

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
