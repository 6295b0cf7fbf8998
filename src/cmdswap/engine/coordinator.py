"""Translation coordinator: the engine's single public entry point.

Decision flow:
  raw command
       |
  [1] tokenize            -- parse error / empty     -> no translation
       |
  [2] rule lookup         -- no rule / disabled      -> no translation
       |
  [3] SafetyClassifier    -- deny pattern / risk     -> no translation
       |
  [4] ToolAvailabilityOracle
       |                  -- target and alternatives missing -> no translation
  [5] translator(args, rule, facts, policy)
       |                  -- None                    -> no translation
  [6] "<target> <args...> <tail>"   (operands as written, pipes and redirections kept)

Uncertainty always resolves toward running the original command.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cmdswap.engine.availability import PathLocator, ToolAvailabilityOracle
from cmdswap.engine.environment import EnvironmentFacts, VcsProbe, detect_environment
from cmdswap.engine.safety import SafetyClassifier
from cmdswap.engine.tokenizer import render, tokenize
from cmdswap.engine.translators import (
    TRANSLATOR_REGISTRY,
    CommandTranslator,
    ToolKind,
    get_translator,
    init_default_translators,
)
from cmdswap.exceptions import ParseError
from cmdswap.schemas.config import ReplacementRule, ReplacerConfig
from cmdswap.schemas.translation import TranslationDecision, TranslationOutcome

logger = logging.getLogger("cmdswap")


def _ensure_translators() -> None:
    if not TRANSLATOR_REGISTRY:
        init_default_translators()


class TranslationCoordinator:
    """Decides whether a command can be swapped for a faster tool, and how.

    Args:
        config: Rules and global policy. Read-only for the coordinator's lifetime.
        oracle: Shared availability cache. Built from the config when omitted.
        vcs_probe: Answers "is this directory inside a repository".

    Raises:
        ConfigurationError: if a deny pattern does not compile.
    """

    def __init__(
        self,
        config: ReplacerConfig,
        oracle: ToolAvailabilityOracle | None = None,
        vcs_probe: VcsProbe | None = None,
    ) -> None:
        _ensure_translators()
        self._config = config
        self._classifier = SafetyClassifier(config.settings)
        self._oracle = oracle or ToolAvailabilityOracle(
            locator=PathLocator(config.tools),
            ttl_ms=config.settings.tool_cache_ttl_ms,
            cache_enabled=config.settings.cache_tool_checks,
        )
        self._vcs_probe = vcs_probe

    @property
    def config(self) -> ReplacerConfig:
        return self._config

    @property
    def oracle(self) -> ToolAvailabilityOracle:
        return self._oracle

    def translate(self, raw_command: str, cwd: Path | str | None = None) -> str | None:
        """Return the replacement command, or None to run *raw_command* as-is."""
        return self.evaluate(raw_command, cwd).translated_command

    def evaluate(self, raw_command: str, cwd: Path | str | None = None) -> TranslationDecision:
        decision = self._evaluate(raw_command, Path(cwd) if cwd is not None else None)
        logger.debug(
            "command=%r outcome=%s target=%s reason=%s",
            raw_command,
            decision.outcome.value,
            decision.target_tool,
            decision.reason,
        )
        return decision

    def _evaluate(self, raw_command: str, cwd: Path | None) -> TranslationDecision:
        # Step 1: tokenize
        try:
            parsed = tokenize(raw_command)
        except ParseError as exc:
            return self._decline(raw_command, TranslationOutcome.PARSE_ERROR, str(exc))
        if parsed.is_empty:
            return self._decline(raw_command, TranslationOutcome.EMPTY, "Empty command.")

        # Step 2: rule lookup
        source = parsed.name
        rule = self._config.replacements.get(source)
        if rule is None:
            return self._decline(
                raw_command, TranslationOutcome.NO_RULE, f"No rule for {source!r}.", source
            )
        if not rule.enabled:
            return self._decline(
                raw_command, TranslationOutcome.DISABLED, f"Rule for {source!r} is disabled.", source
            )
        translator = get_translator(source)
        if translator is None:
            return self._decline(
                raw_command,
                TranslationOutcome.NO_RULE,
                f"No translator is available for {source!r}.",
                source,
            )

        # Step 3: safety
        verdict = self._classifier.classify(raw_command, parsed, translator.semantic_risk)
        if verdict.unsafe:
            outcome = (
                TranslationOutcome.DENY_PATTERN
                if verdict.deny_pattern_hit
                else TranslationOutcome.SEMANTIC_RISK
            )
            return self._decline(
                raw_command, outcome, verdict.reason, source, pattern=verdict.matched_pattern
            )

        # Step 4: target availability
        target = self._resolve_target(rule, translator)
        if target is None:
            if not rule.use_fallback:
                logger.warning(
                    "tool=%s missing and fallback disabled for %s, leaving command unchanged",
                    rule.replacement,
                    source,
                )
            return self._decline(
                raw_command,
                TranslationOutcome.TOOL_UNAVAILABLE,
                f"{rule.replacement} is not installed.",
                source,
            )

        # Step 5: translate
        facts = EnvironmentFacts()
        if translator.kind == ToolKind.GREP:
            facts = self._environment(cwd)
            if facts is None:
                return self._decline(
                    raw_command,
                    TranslationOutcome.UNSUPPORTED,
                    "Could not inspect the working directory.",
                    source,
                )
        args = translator.translate(parsed.args, rule, facts, self._config.settings)
        if args is None:
            return self._decline(
                raw_command,
                TranslationOutcome.UNSUPPORTED,
                f"{source} invocation has no safe {target} equivalent.",
                source,
            )

        # Step 6: render
        return TranslationDecision(
            original_command=raw_command,
            translated_command=render([target, *args], parsed.tail),
            outcome=TranslationOutcome.TRANSLATED,
            source_tool=source,
            target_tool=target,
            reason=f"{source} -> {target}",
        )

    def _resolve_target(self, rule: ReplacementRule, translator: CommandTranslator) -> str | None:
        if self._oracle.is_available(rule.replacement):
            return rule.replacement
        for alternative in rule.alternatives or translator.alternatives:
            if self._oracle.is_available(alternative):
                logger.debug("tool=%s missing, using alternative=%s", rule.replacement, alternative)
                return alternative
        return None

    def _environment(self, cwd: Path | None) -> EnvironmentFacts | None:
        try:
            return detect_environment(cwd, self._vcs_probe)
        except Exception:
            logger.exception("VCS probe failed for cwd=%s", cwd)
            return None

    @staticmethod
    def _decline(
        raw_command: str,
        outcome: TranslationOutcome,
        reason: str,
        source: str | None = None,
        pattern: str | None = None,
    ) -> TranslationDecision:
        return TranslationDecision(
            original_command=raw_command,
            outcome=outcome,
            source_tool=source,
            reason=reason,
            matched_pattern=pattern,
        )
