
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Accounts file; resolved through DEFAULT_CONFIG_PATH when unset
    CONFIG_PATH: Path | None = None

    # Per-account ignore file, looked up inside the statement directory
    IGNORE_FILENAME: str = ".statementignore.toml"

    # Logging
    LOG_LEVEL: str = "WARNING"

    # Threads used when scanning every account of a ledger
    MAX_WORKERS: int = 4

    @property
    def CONFIG_DIR(self) -> Path:
        xdg = os.getenv("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / "statements"

    @property
    def DEFAULT_CONFIG_PATH(self) -> Path:
        if self.CONFIG_PATH is not None:
            return self.CONFIG_PATH.expanduser()
        candidate = self.CONFIG_DIR / "config.toml"
        if candidate.exists():
            return candidate
        return Path("config.toml")

    model_config = SettingsConfigDict(
        env_prefix="STATEMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
