"""Runtime settings, read from ``ORDERDESK_*`` environment variables or ``.env``."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ORDERDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Relative to where the command runs, not to the installed package.
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "data")
    data_file: str = "orderdesk.json"
    log_level: str = "WARNING"

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.data_file
