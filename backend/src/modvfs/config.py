import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_data_dir() -> Path:
    if env := os.environ.get("MODVFS_DATA_DIR"):
        return Path(env)
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / "modvfs"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MODVFS_",
        extra="ignore",
    )

    data_dir: Path = Path("")
    db_path: Path = Path("")
    host: str = "127.0.0.1"
    port: int = 8430
    log_level: str = "INFO"

    advisor: Literal["category", "http", "openai"] = "category"
    advisor_url: str = ""
    advisor_timeout: float = 30.0
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    fuzzy_name_matching: bool = True
    parallel_recompute: bool = False

    @model_validator(mode="after")
    def _resolve_data_paths(self) -> "Settings":
        if self.data_dir == Path(""):
            self.data_dir = _default_data_dir()
        if self.db_path == Path(""):
            self.db_path = self.data_dir / "modvfs.db"
        return self


settings = Settings()
