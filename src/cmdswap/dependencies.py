"""Dependency wiring shared by the HTTP API and the CLI."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, status

from cmdswap.config import settings
from cmdswap.engine.availability import PathLocator, ToolAvailabilityOracle
from cmdswap.engine.config_loader import load_replacer_config
from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.exceptions import ConfigurationError
from cmdswap.schemas.config import ReplacerConfig


def load_config() -> ReplacerConfig:
    """Load the rules file and apply environment overrides."""
    config = load_replacer_config(
        settings.resolved_config_path(), create_missing=settings.create_missing_config
    )
    if settings.compatibility_mode is not None:
        policy = config.settings.model_copy(
            update={"compatibility_mode": settings.compatibility_mode}
        )
        config = config.model_copy(update={"settings": policy})
    return config


@lru_cache
def get_config() -> ReplacerConfig:
    return load_config()


@lru_cache
def get_oracle() -> ToolAvailabilityOracle:
    """Process-wide availability cache shared by every evaluation."""
    config = get_config()
    return ToolAvailabilityOracle(
        locator=PathLocator(config.tools),
        ttl_ms=config.settings.tool_cache_ttl_ms,
        cache_enabled=config.settings.cache_tool_checks,
    )


@lru_cache
def get_coordinator() -> TranslationCoordinator:
    """Build and return the singleton TranslationCoordinator."""
    return TranslationCoordinator(get_config(), oracle=get_oracle())


def require_coordinator() -> TranslationCoordinator:
    """FastAPI dependency: a broken rules file becomes a 503, not a crash."""
    try:
        return get_coordinator()
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


def require_oracle(
    coordinator: TranslationCoordinator = Depends(require_coordinator),
) -> ToolAvailabilityOracle:
    return coordinator.oracle
