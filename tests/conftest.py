"""Shared test fixtures."""

import os
import tempfile
from pathlib import Path

# Set env vars before any cmdswap imports so Settings picks them up
os.environ.setdefault(
    "CMDSWAP_CONFIG_PATH",
    str(Path(tempfile.gettempdir()) / "cmdswap-tests" / "absent" / "config.json"),
)
os.environ.setdefault("CMDSWAP_CREATE_MISSING_CONFIG", "false")

import pytest

from cmdswap.engine.availability import ToolAvailabilityOracle
from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.engine.environment import EnvironmentFacts
from cmdswap.engine.translators import TRANSLATOR_REGISTRY, init_default_translators
from cmdswap.schemas.config import GlobalPolicy, ReplacerConfig

ALL_TOOLS = ("rg", "fd", "bat", "eza", "exa", "sd", "procs")

LENIENT = GlobalPolicy()
STRICT = GlobalPolicy(compatibility_mode=True)
NO_VCS = EnvironmentFacts()
IN_VCS = EnvironmentFacts(inside_vcs=True)


class FakeLocator:
    """Records every live lookup instead of scanning PATH."""

    def __init__(self, installed=ALL_TOOLS, fail: bool = False):
        self.installed = set(installed)
        self.fail = fail
        self.calls: list[str] = []

    def exists_on_path(self, name: str) -> bool:
        self.calls.append(name)
        if self.fail:
            raise OSError("PATH lookup failed")
        return name in self.installed


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _setup_translators():
    """Ensure translators are registered for all tests."""
    TRANSLATOR_REGISTRY.clear()
    init_default_translators()


@pytest.fixture
def default_config() -> ReplacerConfig:
    return ReplacerConfig.default()


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()


@pytest.fixture
def coordinator(default_config: ReplacerConfig, locator: FakeLocator) -> TranslationCoordinator:
    return make_coordinator(config=default_config, locator=locator)


def with_policy(config: ReplacerConfig, **updates) -> ReplacerConfig:
    """Copy *config* with some GlobalPolicy fields replaced."""
    policy = config.settings.model_copy(update=updates)
    return config.model_copy(update={"settings": policy})


def with_rule(config: ReplacerConfig, command: str, **updates) -> ReplacerConfig:
    """Copy *config* with some fields of one rule replaced."""
    rule = config.replacements[command].model_copy(update=updates)
    return config.model_copy(update={"replacements": {**config.replacements, command: rule}})


def make_coordinator(
    config: ReplacerConfig | None = None,
    locator: FakeLocator | None = None,
    inside_vcs: bool = False,
    compatibility_mode: bool | None = None,
) -> TranslationCoordinator:
    """Helper to create a coordinator that never touches PATH or the filesystem."""
    config = config or ReplacerConfig.default()
    if compatibility_mode is not None:
        config = with_policy(config, compatibility_mode=compatibility_mode)
    oracle = ToolAvailabilityOracle(locator=locator or FakeLocator())
    return TranslationCoordinator(config, oracle=oracle, vcs_probe=lambda cwd: inside_vcs)
