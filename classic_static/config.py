"""classic-static configuration: Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Settings of the bundled application (``classic_static.main``)."""

    app_name: str = "classic-static"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"

    # Static root (relative paths resolved from the working directory)
    root_dir: str = "./public"

    # Handler options
    methods: Annotated[list[str], NoDecode] = ["GET", "HEAD"]
    show_dir_contents: bool = True
    index: Annotated[list[str], NoDecode] = ["index.html", "index.htm"]
    url_prefix: str = ""
    urls_reserved: Annotated[list[str], NoDecode] = ["/api"]
    browser_cache_enabled: bool = True
    browser_cache_max_age: int = 3600  # seconds
    use_original_url: bool = True

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_prefix="CLASSIC_STATIC_",
        extra="ignore",
    )

    @field_validator("methods", "index", "urls_reserved", mode="before")
    @classmethod
    def split_comma_list(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str):
            if value.startswith("["):
                return json.loads(value)
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @model_validator(mode="after")
    def _resolve_root(self) -> "Settings":
        """Ensure the static root is absolute."""
        root = Path(self.root_dir)
        if not root.is_absolute():
            self.root_dir = str(root.resolve())
        return self

    def handler_options(self) -> dict[str, Any]:
        """Keyword arguments for ``StaticConfig.build``."""
        return {
            "method": self.methods,
            "show_dir_contents": self.show_dir_contents,
            "index": self.index,
            "url_prefix": self.url_prefix,
            "urls_reserved": self.urls_reserved,
            "browser_cache_enabled": self.browser_cache_enabled,
            "browser_cache_max_age": self.browser_cache_max_age,
            "use_original_url": self.use_original_url,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

