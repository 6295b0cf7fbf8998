"""Exceptions raised by the translation engine and its configuration layer."""

from __future__ import annotations


class CmdSwapError(Exception):
    """Base exception for all cmdswap errors."""


class ParseError(CmdSwapError):
    """Raised when a command string cannot be split into shell words."""

    def __init__(self, command: str, detail: str) -> None:
        self.command = command
        self.detail = detail
        super().__init__(f"Cannot parse command {command!r}: {detail}")


class ConfigurationError(CmdSwapError):
    """Raised when the replacement configuration is invalid.

    A bad deny pattern must stop rule construction: skipping it silently
    would let through commands the user asked to keep untouched.
    """
