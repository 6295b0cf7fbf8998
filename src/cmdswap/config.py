"""Process configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


def _default_config_path() -> str:
    return str(Path.home() / ".claude" / "hooks" / "command-replacer" / "config.json")


class Settings(BaseSettings):
    # Replacement rules file; created with defaults on first run
    config_path: str = _default_config_path()
    create_missing_config: bool = True

    # Overrides settings.compatibility_mode from the rules file when set
    compatibility_mode: bool | None = None

    # Server
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    model_config = {"env_prefix": "CMDSWAP_", "env_file": ".env"}

    def resolved_config_path(self) -> Path:
        return Path(self.config_path).expanduser()


settings = Settings()
