"""Load and persist the replacement rules file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from cmdswap.exceptions import ConfigurationError
from cmdswap.schemas.config import ReplacerConfig

logger = logging.getLogger("cmdswap")


def load_replacer_config(path: Path, create_missing: bool = True) -> ReplacerConfig:
    """Read the rules file at *path*.

    A missing file yields the default rules, written back to *path* when
    *create_missing* is set. Unreadable JSON or an invalid rule (including a
    deny pattern that does not compile) raises ConfigurationError.
    """
    if not path.exists():
        config = ReplacerConfig.default()
        if create_missing:
            try:
                save_replacer_config(config, path)
                logger.info("Wrote default rules to %s", path)
            except OSError:
                logger.warning("Could not write default rules to %s", path, exc_info=True)
        return config

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Failed to read rules file {path}: {exc}") from exc

    try:
        return ReplacerConfig(**data)
    except (ValidationError, TypeError) as exc:
        raise ConfigurationError(f"Invalid rules file {path}: {exc}") from exc


def save_replacer_config(config: ReplacerConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2) + "\n", encoding="utf-8")
