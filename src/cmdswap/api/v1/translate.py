"""Translation API router."""

import logging

from fastapi import APIRouter, Depends, status

from cmdswap.dependencies import require_coordinator, require_oracle
from cmdswap.engine.availability import ToolAvailabilityOracle
from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.schemas.translation import (
    RuleSummary,
    ToolAvailability,
    TranslateRequest,
    TranslationDecision,
)

logger = logging.getLogger("cmdswap")

router = APIRouter(prefix="/v1", tags=["translate"])


# Sync handlers run in the threadpool; the oracle's lock makes that safe
@router.post(
    "/translate",
    response_model=TranslationDecision,
    status_code=status.HTTP_200_OK,
    summary="Translate a shell command",
    description=(
        "Tokenizes the command, applies the safety checks and returns the "
        "replacement, or translated_command=null to run the original."
    ),
)
def translate_command(
    request: TranslateRequest,
    coordinator: TranslationCoordinator = Depends(require_coordinator),
) -> TranslationDecision:
    decision = coordinator.evaluate(request.command, request.cwd)
    logger.info(
        "outcome=%s source=%s target=%s",
        decision.outcome.value,
        decision.source_tool,
        decision.target_tool,
    )
    return decision


@router.post(
    "/translate-batch",
    response_model=list[TranslationDecision],
    summary="Translate several commands",
)
def translate_batch(
    requests: list[TranslateRequest],
    coordinator: TranslationCoordinator = Depends(require_coordinator),
) -> list[TranslationDecision]:
    return [coordinator.evaluate(req.command, req.cwd) for req in requests]


@router.get(
    "/rules",
    response_model=list[RuleSummary],
    summary="List replacement rules, highest priority first",
)
def list_rules(
    coordinator: TranslationCoordinator = Depends(require_coordinator),
) -> list[RuleSummary]:
    return [
        RuleSummary(
            command=command,
            replacement=rule.replacement,
            enabled=rule.enabled,
            priority=rule.priority,
            use_fallback=rule.use_fallback,
            alternatives=list(rule.alternatives),
        )
        for command, rule in coordinator.config.rules_by_priority()
    ]


@router.get(
    "/tools/{name}",
    response_model=ToolAvailability,
    summary="Check whether a replacement tool is installed",
)
def check_tool(
    name: str,
    oracle: ToolAvailabilityOracle = Depends(require_oracle),
) -> ToolAvailability:
    return ToolAvailability(tool=name, available=oracle.is_available(name))
