"""Canonical schemas for the PreToolUse hook envelope."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PRE_TOOL_USE = "PreToolUse"
SHELL_TOOL_NAMES = {"bash", "shell"}


class HookSession(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    project_dir: str | None = Field(default=None, alias="projectDir")


class HookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event_type: str = Field(..., alias="type")
    data: dict[str, Any] = Field(default_factory=dict)


class HookInput(BaseModel):
    """Accepts both the nested session/event envelope and the flat tool_input form."""

    model_config = ConfigDict(extra="ignore")

    session: HookSession | None = None
    event: HookEvent | None = None

    hook_event_name: str | None = None
    tool_name: str | None = None
    tool_input: dict[str, Any] | None = None
    cwd: str | None = None

    @property
    def event_name(self) -> str:
        if self.event is not None:
            return self.event.event_type
        return self.hook_event_name or ""

    @property
    def is_shell_call(self) -> bool:
        # The nested envelope only ever carries Bash tool data
        if self.event is not None:
            return True
        return (self.tool_name or "").strip().lower() in SHELL_TOOL_NAMES

    def command(self) -> str:
        data = self.event.data if self.event is not None else (self.tool_input or {})
        value = data.get("command", "")
        return value if isinstance(value, str) else ""

    def working_directory(self) -> str | None:
        if self.cwd:
            return self.cwd
        if self.session is not None and self.session.project_dir:
            return self.session.project_dir
        return None


class HookOutput(BaseModel):
    """The hook never blocks; a translation rides along in context."""

    decision: Literal["approve"] = "approve"
    message: str | None = None
    context: dict[str, Any] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
