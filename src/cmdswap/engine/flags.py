"""Helpers for recognising and normalising command-line flags."""

from __future__ import annotations

import re

_SHORT_CLUSTER = re.compile(r"^-[A-Za-z]{2,}$")
_QUOTES = "\"'"


def is_flag(arg: str) -> bool:
    """A bare "-" names stdin and is an operand, not a flag."""
    return arg.startswith("-") and arg != "-"


def expand_short_flags(
    args: tuple[str, ...] | list[str],
    value_letters: frozenset[str] = frozenset(),
    value_flags: frozenset[str] = frozenset(),
) -> list[str] | None:
    """Split letter-only clusters such as ``-rn`` into ``-r -n``.

    Tokens after ``--`` are left alone, and so is the word following a flag in
    *value_flags* or a cluster ending in one of *value_letters* (``-e -foo``).
    Returns None when a value-taking letter sits anywhere but the end of a
    cluster, since its value would be the rest of the cluster rather than the
    next word.
    """
    expanded: list[str] = []
    takes_value = False
    for index, arg in enumerate(args):
        if takes_value:
            expanded.append(arg)
            takes_value = False
            continue
        if arg == "--":
            expanded.extend(args[index:])
            break
        if not _SHORT_CLUSTER.match(arg):
            expanded.append(arg)
            takes_value = arg in value_flags
            continue
        letters = arg[1:]
        if any(letter in value_letters for letter in letters[:-1]):
            return None
        expanded.extend(f"-{letter}" for letter in letters)
        takes_value = letters[-1] in value_letters
    return expanded


def strip_quotes(value: str) -> str:
    """Trim every leading and trailing quote character."""
    return value.strip('"').strip("'")


def strip_matching_quotes(value: str) -> str:
    """Remove one pair of surrounding quotes when they match."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value
