"""Pydantic models for the replacement rules file."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

DEFAULT_FALLBACK_PATTERNS: list[str] = [
    r"grep.*-P",  # Perl regex
    r"grep.*--null-data",  # binary data handling
    r"find.*-exec",  # find actions
    r"find.*-size",
    r"find.*-perm",
]


class ReplacementRule(BaseModel):
    """Translation policy for one source command."""

    enabled: bool = True
    replacement: str = Field(..., min_length=1, description="Name of the replacement tool.")
    preserve_flags: list[str] = Field(
        default_factory=list,
        description="Flags passed through to the replacement unchanged.",
    )
    flag_mappings: dict[str, str] = Field(
        default_factory=dict,
        description="Source flag -> replacement flag. An empty target drops the flag.",
    )
    priority: int = Field(default=5, ge=0, le=255, description="Higher sorts first.")
    use_fallback: bool = Field(
        default=True,
        description="Run the original command if the replacement tool is missing.",
    )
    alternatives: list[str] = Field(
        default_factory=list,
        description="Tools probed in order when the replacement is missing.",
    )

    model_config = {"frozen": True}


class GlobalPolicy(BaseModel):
    """Process-wide translation settings."""

    debug: bool = False
    cache_tool_checks: bool = True
    tool_cache_ttl_ms: int = Field(default=1000, ge=0)
    compatibility_mode: bool = False
    semantic_analysis: bool = True
    fallback_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FALLBACK_PATTERNS),
        description="Regexes matched against the raw command; any hit forces fallback.",
    )

    model_config = {"frozen": True}

    @field_validator("fallback_patterns")
    @classmethod
    def patterns_must_compile(cls, v: list[str]) -> list[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid fallback pattern {pattern!r}: {exc}") from exc
        return v


class ReplacerConfig(BaseModel):
    """Root of the rules file."""

    tools: dict[str, str] = Field(
        default_factory=dict,
        description="Tool name -> explicit executable path.",
    )
    replacements: dict[str, ReplacementRule] = Field(default_factory=dict)
    settings: GlobalPolicy = Field(default_factory=GlobalPolicy)

    @classmethod
    def default(cls) -> ReplacerConfig:
        return cls(replacements=default_replacements())

    def rules_by_priority(self) -> list[tuple[str, ReplacementRule]]:
        """Rules ordered by priority (highest first), ties broken by command name."""
        return sorted(self.replacements.items(), key=lambda item: (-item[1].priority, item[0]))


def default_replacements() -> dict[str, ReplacementRule]:
    return {
        "grep": ReplacementRule(
            replacement="rg",
            preserve_flags=[
                "-n", "--line-number",
                "-i", "--ignore-case",
                "-v", "--invert-match",
                "-w", "--word-regexp",
                "-x", "--line-regexp",
                "-q", "--quiet",
                "-A", "-B", "-C",
            ],
            flag_mappings={
                "-F": "--fixed-strings",
                "-o": "--only-matching",
                "-c": "--count",
                "-l": "--files-with-matches",
            },
            priority=10,
        ),
        "find": ReplacementRule(
            replacement="fd",
            preserve_flags=[
                "-t", "--type",
                "-e", "--extension",
                "-H", "--hidden",
                "-I", "--no-ignore",
            ],
            flag_mappings={"-name": "", "-iname": "-i"},
            priority=10,
        ),
        "cat": ReplacementRule(
            replacement="bat",
            preserve_flags=["-n", "--number"],
            flag_mappings={"-n": "--number"},
            priority=5,  # bat changes output format
        ),
        "ls": ReplacementRule(
            replacement="eza",
            preserve_flags=[
                "-l",
                "-a", "--all",
                "-r", "--reverse",
                "-d", "--directory",
                "-1",
            ],
            flag_mappings={
                # eza sizes are human readable already; its -h is --header
                "-h": "",
                "--human-readable": "",
                # eza's -t takes a field name
                "-t": "--sort=modified",
                "-S": "--sort=size",
                "-R": "--recurse",
            },
            priority=8,
            alternatives=["exa"],
        ),
        "sed": ReplacementRule(replacement="sd", priority=6),
        "ps": ReplacementRule(
            replacement="procs",
            # procs lists every process with user and command columns by default
            flag_mappings={"-a": "", "-e": "", "-A": "", "-u": "", "-x": "", "-f": ""},
            priority=7,
        ),
    }
