"""Safety classification: decide whether a command may be translated at all.

Two independent checks, either of which suppresses translation:

1. Global deny patterns, matched against the raw command string.
2. A per-tool semantic risk predicate, evaluated on the parsed arguments.

Both run before any translator, so a rejected command is always returned
untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from cmdswap.engine.flags import expand_short_flags, is_flag
from cmdswap.engine.tokenizer import ParsedCommand
from cmdswap.exceptions import ConfigurationError
from cmdswap.schemas.config import GlobalPolicy

SemanticRiskPredicate = Callable[[tuple[str, ...], GlobalPolicy], str | None]


@dataclass
class SafetyVerdict:
    unsafe: bool
    reason: str = ""
    matched_pattern: str | None = None
    deny_pattern_hit: bool = False


# ---------------------------------------------------------------------------
# Global deny patterns
# ---------------------------------------------------------------------------


def compile_deny_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigurationError(f"Invalid fallback pattern {pattern!r}: {exc}") from exc
    return compiled


def match_deny_pattern(raw_command: str, patterns: list[re.Pattern[str]]) -> str | None:
    """Return the first pattern found anywhere in *raw_command*."""
    for pattern in patterns:
        if pattern.search(raw_command):
            return pattern.pattern
    return None


# ---------------------------------------------------------------------------
# grep
# ---------------------------------------------------------------------------

# grep options whose value is the next word
GREP_VALUE_FLAGS = frozenset({
    "-e", "--regexp",
    "-f", "--file",
    "-m", "--max-count",
    "-A", "--after-context",
    "-B", "--before-context",
    "-C", "--context",
    "--include", "--exclude", "--exclude-dir",
})
GREP_VALUE_LETTERS = frozenset("ABCefm")

_GREP_ALWAYS_UNSAFE = {
    "-P": "Perl-compatible regex mode has no rg equivalent",
    "--perl-regexp": "Perl-compatible regex mode has no rg equivalent",
    "-z": "null-separated input is handled differently by rg",
    "--null-data": "null-separated input is handled differently by rg",
}

_GREP_STRICT_UNSAFE = {
    "-E": "extended regex syntax differs from rg's syntax",
    "--extended-regexp": "extended regex syntax differs from rg's syntax",
    "-a": "binary files are treated differently by rg",
    "--text": "binary files are treated differently by rg",
}

# GNU word boundaries, \b, inline groups and lookaround, hex and unicode escapes
_COMPLEX_REGEX_MARKERS = ("\\<", "\\>", "\\b", "(?", "\\x", "\\u")


def has_complex_regex(args: tuple[str, ...] | list[str]) -> bool:
    for arg in args:
        if is_flag(arg):
            continue
        if any(marker in arg for marker in _COMPLEX_REGEX_MARKERS):
            return True
    return False


def grep_semantic_risk(args: tuple[str, ...], policy: GlobalPolicy) -> str | None:
    tokens = expand_short_flags(args, GREP_VALUE_LETTERS, GREP_VALUE_FLAGS) or list(args)
    takes_value = False
    for arg in tokens:
        if takes_value:
            takes_value = False
            continue
        if arg == "--":
            break
        if arg in _GREP_ALWAYS_UNSAFE:
            return f"grep {arg}: {_GREP_ALWAYS_UNSAFE[arg]}"
        if policy.compatibility_mode and arg in _GREP_STRICT_UNSAFE:
            return f"grep {arg}: {_GREP_STRICT_UNSAFE[arg]}"
        takes_value = arg in GREP_VALUE_FLAGS
    if policy.compatibility_mode and has_complex_regex(args):
        return "pattern uses regex constructs that behave differently in rg"
    return None


# ---------------------------------------------------------------------------
# find
# ---------------------------------------------------------------------------

FIND_ACTIONS = frozenset({"-exec", "-execdir", "-ok", "-okdir", "-delete", "-print0"})

FIND_UNSUPPORTED_PREDICATES = frozenset({
    "-size",
    "-mtime", "-ctime", "-atime",
    "-perm", "-readable", "-writable", "-executable",
    "-user", "-group", "-uid", "-gid",
})

FIND_LOGIC_OPERATORS = frozenset({"-and", "-or", "-not", "-a", "-o", "!", "(", ")"})

FIND_COMPLEX_PREDICATES = frozenset({
    "-regex", "-iregex",
    "-newer", "-cnewer", "-anewer",
    "-samefile", "-inum", "-links",
    "-path", "-ipath",
})

FIND_TYPE_VALUES = {"f": "file", "d": "directory", "l": "symlink"}


def find_semantic_risk(args: tuple[str, ...], policy: GlobalPolicy) -> str | None:
    for index, arg in enumerate(args):
        if arg in FIND_ACTIONS:
            return f"find action {arg} cannot be expressed with fd"
        if arg in FIND_UNSUPPORTED_PREDICATES:
            return f"find predicate {arg} has no fd equivalent"
        if arg in FIND_LOGIC_OPERATORS:
            return f"find operator {arg!r} cannot be expressed with fd"
        if arg == "-type":
            value = args[index + 1] if index + 1 < len(args) else None
            if value not in FIND_TYPE_VALUES:
                return f"find -type {value or '(missing)'} has no fd equivalent"
        if policy.compatibility_mode and arg in FIND_COMPLEX_PREDICATES:
            return f"find predicate {arg} is not translated in compatibility mode"
    return None


SEMANTIC_RISK_PREDICATES: dict[str, SemanticRiskPredicate] = {
    "grep": grep_semantic_risk,
    "find": find_semantic_risk,
}


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class SafetyClassifier:
    """Applies the deny list and the per-tool predicate for one policy."""

    def __init__(self, policy: GlobalPolicy) -> None:
        self._policy = policy
        self._patterns = compile_deny_patterns(policy.fallback_patterns)

    @property
    def policy(self) -> GlobalPolicy:
        return self._policy

    def classify(
        self,
        raw_command: str,
        parsed: ParsedCommand,
        predicate: SemanticRiskPredicate | None = None,
    ) -> SafetyVerdict:
        if self._policy.semantic_analysis:
            pattern = match_deny_pattern(raw_command, self._patterns)
            if pattern is not None:
                return SafetyVerdict(
                    unsafe=True,
                    reason=f"Command matches fallback pattern {pattern!r}",
                    matched_pattern=pattern,
                    deny_pattern_hit=True,
                )

        if predicate is None:
            predicate = SEMANTIC_RISK_PREDICATES.get(parsed.name)
        if predicate is not None:
            reason = predicate(parsed.args, self._policy)
            if reason is not None:
                return SafetyVerdict(unsafe=True, reason=reason)

        return SafetyVerdict(unsafe=False)

    def is_unsafe(self, raw_command: str, parsed: ParsedCommand) -> bool:
        return self.classify(raw_command, parsed).unsafe


def is_unsafe(raw_command: str, parsed: ParsedCommand, policy: GlobalPolicy) -> bool:
    """One-shot check; compiles the policy's deny patterns on every call."""
    return SafetyClassifier(policy).is_unsafe(raw_command, parsed)
