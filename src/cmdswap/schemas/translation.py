"""Pydantic models describing the outcome of a translation attempt."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class TranslationOutcome(StrEnum):
    TRANSLATED = "translated"
    PARSE_ERROR = "parse_error"
    EMPTY = "empty"
    NO_RULE = "no_rule"
    DISABLED = "disabled"
    DENY_PATTERN = "deny_pattern"
    SEMANTIC_RISK = "semantic_risk"
    TOOL_UNAVAILABLE = "tool_unavailable"
    UNSUPPORTED = "unsupported"


class TranslationDecision(BaseModel):
    """The coordinator's verdict for a single command."""

    original_command: str
    translated_command: str | None = Field(
        default=None,
        description="Replacement command. None means run the original unchanged.",
    )
    outcome: TranslationOutcome
    source_tool: str | None = None
    target_tool: str | None = None
    reason: str = Field(default="", description="Human-readable explanation.")
    matched_pattern: str | None = Field(
        default=None,
        description="Deny pattern that suppressed translation, if any.",
    )

    @property
    def translated(self) -> bool:
        return self.translated_command is not None


class TranslateRequest(BaseModel):
    """Request body for POST /v1/translate."""

    command: str = Field(..., max_length=65536)
    cwd: str | None = Field(
        default=None,
        description="Working directory of the command. Defaults to the server's cwd.",
    )


class RuleSummary(BaseModel):
    """One entry of GET /v1/rules."""

    command: str
    replacement: str
    enabled: bool
    priority: int
    use_fallback: bool
    alternatives: list[str] = Field(default_factory=list)


class ToolAvailability(BaseModel):
    tool: str
    available: bool
