"""Logging setup shared by the HTTP app and the CLI."""

import logging
import sys
from typing import TextIO

from cmdswap.config import settings


def configure_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Set up structured JSON-style logging on the cmdswap logger."""
    name = (level or settings.log_level).upper()
    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = logging.Formatter(
        '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
    )
    handler.setFormatter(formatter)
    root = logging.getLogger("cmdswap")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, name, logging.INFO))
