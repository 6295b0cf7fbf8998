"""cmdswap: swap shell commands for faster equivalents when it is safe to."""

from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.exceptions import CmdSwapError, ConfigurationError, ParseError
from cmdswap.schemas.config import GlobalPolicy, ReplacementRule, ReplacerConfig

__version__ = "0.1.0"

__all__ = [
    "CmdSwapError",
    "ConfigurationError",
    "GlobalPolicy",
    "ParseError",
    "ReplacementRule",
    "ReplacerConfig",
    "TranslationCoordinator",
]
