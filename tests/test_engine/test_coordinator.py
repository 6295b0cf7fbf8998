"""End-to-end tests for the translation coordinator."""

import shlex

import pytest

from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.exceptions import ConfigurationError
from cmdswap.schemas.config import ReplacementRule
from cmdswap.schemas.translation import TranslationOutcome
from tests.conftest import FakeLocator, make_coordinator, with_policy, with_rule


class TestBasicTranslation:
    def test_grep(self, coordinator):
        assert coordinator.translate("grep -n pattern file.txt") == "rg -n pattern file.txt"

    def test_find(self, coordinator):
        result = coordinator.translate("find . -name '*.rs'")
        assert result == "fd '*.rs' -H -I --glob ."
        assert shlex.split(result) == ["fd", "*.rs", "-H", "-I", "--glob", "."]

    def test_cat(self, coordinator):
        assert coordinator.translate("cat -n notes.txt") == "bat --style=plain --number notes.txt"

    def test_ls(self, coordinator):
        assert coordinator.translate("ls -la") == "eza -l -a"

    def test_sed(self, coordinator):
        assert coordinator.translate("sed s/foo/bar/ file") == "sd foo bar file"

    def test_ps(self, coordinator):
        assert coordinator.translate("ps aux") == "procs"

    def test_decision_details(self, coordinator):
        decision = coordinator.evaluate("grep -n x f")
        assert decision.outcome == TranslationOutcome.TRANSLATED
        assert decision.translated
        assert decision.source_tool == "grep"
        assert decision.target_tool == "rg"

    def test_translation_is_idempotent(self, coordinator):
        assert coordinator.translate("rg -n pattern file.txt") is None

    def test_quoted_pattern_survives(self, coordinator):
        result = coordinator.translate('grep -n "two words" f')
        assert result == 'rg -n "two words" f'
        assert shlex.split(result) == ["rg", "-n", "two words", "f"]

    def test_user_filter(self, coordinator):
        assert coordinator.translate("ps -u root") == "procs root"

    def test_pattern_that_looks_like_flag(self, coordinator):
        assert coordinator.translate("grep -e -foo file") == "rg -e -foo file"


class TestShellSyntax:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("ls *.py", "eza *.py"),
            ("grep -n TODO *.py", "rg -n TODO *.py"),
            ("cat $HOME/.bashrc", "bat --style=plain $HOME/.bashrc"),
            ('cat "$HOME/my notes.txt"', 'bat --style=plain "$HOME/my notes.txt"'),
            ("ls ~/src", "eza ~/src"),
        ],
    )
    def test_words_reach_the_shell_unquoted(self, coordinator, raw, expected):
        assert coordinator.translate(raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("grep -n x f | head", "rg -n x f | head"),
            ("cat a > b", "bat --style=plain a > b"),
            ("grep x f 2>/dev/null", "rg x f 2>/dev/null"),
            ("grep x f && echo ok", "rg x f && echo ok"),
        ],
    )
    def test_pipes_and_redirections_kept(self, coordinator, raw, expected):
        assert coordinator.translate(raw) == expected

    def test_command_substitution_declined(self, coordinator):
        decision = coordinator.evaluate("cat $(ls)")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.PARSE_ERROR

    def test_variable_in_sed_expression_declined(self, coordinator):
        decision = coordinator.evaluate('sed "s/$OLD/new/" f')
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.UNSUPPORTED


class TestGrepSemantics:
    def test_inside_repository(self, default_config):
        coordinator = make_coordinator(default_config, inside_vcs=True)
        assert (
            coordinator.translate("grep -n pattern file.txt")
            == "rg --no-ignore --hidden -n pattern file.txt"
        )

    def test_include_becomes_glob(self, coordinator):
        result = coordinator.translate("grep -r --include='*.rs' pattern .")
        assert "--glob" in result
        assert "*.rs" in result
        assert "!*.rs" not in result

    def test_exclude_becomes_negated_glob(self, coordinator):
        assert "!*.tmp" in coordinator.translate("grep -r --exclude='*.tmp' pattern .")

    def test_cwd_reaches_probe(self, default_config):
        seen = []
        coordinator = TranslationCoordinator(
            default_config,
            oracle=make_coordinator().oracle,
            vcs_probe=lambda cwd: seen.append(cwd) or False,
        )
        coordinator.translate("grep x f", cwd="/work/repo")
        assert [str(p) for p in seen] == ["/work/repo"]

    def test_probe_failure_declines_grep(self, default_config):
        def broken(cwd):
            raise PermissionError("denied")

        coordinator = TranslationCoordinator(
            default_config, oracle=make_coordinator().oracle, vcs_probe=broken
        )
        decision = coordinator.evaluate("grep x f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.UNSUPPORTED
        # Only grep consults the probe
        assert coordinator.translate("ls -l") == "eza -l"

    def test_removed_working_directory_declines_grep(self, coordinator, tmp_path, monkeypatch):
        gone = tmp_path / "gone"
        gone.mkdir()
        monkeypatch.chdir(gone)
        gone.rmdir()
        decision = coordinator.evaluate("grep x f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.UNSUPPORTED

    def test_extended_regex_allowed_by_default(self, coordinator):
        assert coordinator.translate("grep -E 'a|b' file") == "rg 'a|b' file"

    def test_extended_regex_declined_in_compatibility_mode(self):
        coordinator = make_coordinator(compatibility_mode=True)
        assert coordinator.translate("grep -E 'a|b' file") is None

    def test_word_boundary_declined_in_compatibility_mode(self):
        coordinator = make_coordinator(compatibility_mode=True)
        assert coordinator.translate(r"grep '\<word\>' file") is None


class TestDeclines:
    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty(self, coordinator, raw):
        decision = coordinator.evaluate(raw)
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.EMPTY

    def test_parse_error(self, coordinator):
        decision = coordinator.evaluate("grep 'unterminated")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.PARSE_ERROR

    def test_no_rule(self, coordinator):
        decision = coordinator.evaluate("du -sh .")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.NO_RULE

    def test_rule_without_translator(self, default_config):
        config = default_config.model_copy(
            update={
                "replacements": {
                    **default_config.replacements,
                    "du": ReplacementRule(replacement="dust"),
                }
            }
        )
        coordinator = make_coordinator(config, FakeLocator(installed=("dust",)))
        assert coordinator.evaluate("du -sh .").outcome == TranslationOutcome.NO_RULE

    def test_disabled_rule(self, default_config):
        coordinator = make_coordinator(with_rule(default_config, "grep", enabled=False))
        decision = coordinator.evaluate("grep x f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.DISABLED

    def test_perl_regex(self, coordinator):
        decision = coordinator.evaluate("grep -P '\\d+' f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.DENY_PATTERN
        assert decision.matched_pattern == r"grep.*-P"

    def test_perl_regex_without_semantic_analysis(self, default_config):
        coordinator = make_coordinator(with_policy(default_config, semantic_analysis=False))
        decision = coordinator.evaluate("grep -P '\\d+' f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.SEMANTIC_RISK

    def test_find_exec(self, coordinator):
        assert coordinator.translate("find . -name '*.tmp' -exec rm {} \\;") is None

    def test_find_or(self, coordinator):
        assert coordinator.translate("find . -name a -o -name b") is None

    def test_custom_deny_pattern(self, default_config):
        coordinator = make_coordinator(
            with_policy(default_config, fallback_patterns=["secret"])
        )
        decision = coordinator.evaluate("cat secret.txt")
        assert decision.outcome == TranslationOutcome.DENY_PATTERN
        assert decision.matched_pattern == "secret"

    def test_sed_script_flag(self, coordinator):
        decision = coordinator.evaluate("sed -e 's/a/b/' f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.UNSUPPORTED

    def test_invalid_deny_pattern_rejected_at_construction(self, default_config):
        # model_copy skips validation, so the coordinator sees the bad pattern
        config = with_policy(default_config, fallback_patterns=["(unclosed"])
        with pytest.raises(ConfigurationError):
            make_coordinator(config)


class TestToolAvailability:
    def test_missing_tool(self, default_config):
        coordinator = make_coordinator(default_config, FakeLocator(installed=()))
        decision = coordinator.evaluate("grep x f")
        assert decision.translated_command is None
        assert decision.outcome == TranslationOutcome.TOOL_UNAVAILABLE

    def test_missing_tool_without_fallback(self, default_config):
        config = with_rule(default_config, "grep", use_fallback=False)
        coordinator = make_coordinator(config, FakeLocator(installed=()))
        assert coordinator.translate("grep x f") is None

    def test_exa_used_when_eza_missing(self, default_config):
        coordinator = make_coordinator(default_config, FakeLocator(installed=("exa",)))
        assert coordinator.translate("ls -la") == "exa -l -a"

    def test_ls_without_eza_or_exa(self, default_config):
        coordinator = make_coordinator(default_config, FakeLocator(installed=("rg",)))
        assert coordinator.translate("ls -la") is None

    def test_rule_alternatives_take_precedence(self, default_config):
        config = with_rule(default_config, "ls", alternatives=["lsd"])
        coordinator = make_coordinator(config, FakeLocator(installed=("lsd", "exa")))
        assert coordinator.translate("ls -l") == "lsd -l"

    def test_availability_cached_across_calls(self, default_config):
        locator = FakeLocator()
        coordinator = make_coordinator(default_config, locator)
        coordinator.translate("grep a f")
        coordinator.translate("grep b f")
        assert locator.calls == ["rg"]

    def test_unknown_command_never_probes(self, default_config):
        locator = FakeLocator()
        make_coordinator(default_config, locator).translate("du -sh .")
        assert locator.calls == []


class TestConstruction:
    def test_default_oracle_built_from_config(self, default_config):
        coordinator = TranslationCoordinator(
            with_policy(default_config, tool_cache_ttl_ms=250, cache_tool_checks=False)
        )
        assert coordinator.oracle.ttl == 0.25
        assert coordinator.oracle.cache_enabled is False

    def test_config_exposed(self, default_config):
        assert make_coordinator(default_config).config is default_config
