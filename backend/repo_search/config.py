import sys
from functools import lru_cache
from typing import Optional

from loguru import logger
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    github_token: Optional[str] = Field(default=None, alias="GITHUB_TOKEN")
    github_base_url: HttpUrl = Field(
        default="https://api.github.com", alias="GITHUB_BASE_URL"
    )
    github_proxy: Optional[str] = Field(default=None, alias="GITHUB_PROXY")
    # where proxy-mode clients send their searches
    search_proxy_url: HttpUrl = Field(
        default="http://localhost:8020", alias="SEARCH_PROXY_URL"
    )
    user_agent: str = Field(default="repo-search", alias="USER_AGENT")
    request_timeout_seconds: float = Field(default=20, alias="REQUEST_TIMEOUT_SECONDS")
    cache_ttl_seconds: int = Field(default=60, alias="CACHE_TTL_SECONDS")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8020, alias="PORT")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # ignore unrelated env vars to avoid validation errors


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
