"""Filesystem probes that describe where a command is about to run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger("cmdswap")

VcsProbe = Callable[[Path], bool]

_VCS_MARKERS = (".git",)


@dataclass(frozen=True)
class EnvironmentFacts:
    """Per-evaluation facts consumed by the translators."""

    inside_vcs: bool = False


def is_inside_version_control(cwd: Path) -> bool:
    """True if *cwd* or any of its parents holds a VCS marker (a .git dir or file)."""
    try:
        current = cwd.resolve()
    except OSError:
        logger.debug("cwd=%s could not be resolved", cwd)
        return False
    for directory in (current, *current.parents):
        for marker in _VCS_MARKERS:
            try:
                if (directory / marker).exists():
                    return True
            except OSError:
                continue
    return False


def detect_environment(cwd: Path | None = None, probe: VcsProbe | None = None) -> EnvironmentFacts:
    """Raises OSError when *cwd* is omitted and the process cwd no longer exists."""
    probe = probe or is_inside_version_control
    if cwd is None:
        cwd = Path.cwd()
    return EnvironmentFacts(inside_vcs=probe(cwd))
