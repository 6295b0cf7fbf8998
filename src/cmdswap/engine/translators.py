"""Per-tool translators from a source command to its faster replacement.

Each translator is a pure function:
    (args, rule, facts, policy) -> list[str] | None

The returned list holds the replacement's arguments (the tool name is added by
the coordinator). None means there is no safe translation and the original
command must run unchanged. Translators are registered by tool kind and looked
up by the coordinator from the command name.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from cmdswap.engine.environment import EnvironmentFacts
from cmdswap.engine.flags import (
    expand_short_flags,
    is_flag,
    strip_matching_quotes,
    strip_quotes,
)
from cmdswap.engine.safety import (
    FIND_TYPE_VALUES,
    GREP_VALUE_FLAGS,
    GREP_VALUE_LETTERS,
    SemanticRiskPredicate,
    find_semantic_risk,
    grep_semantic_risk,
)
from cmdswap.engine.tokenizer import has_expansion
from cmdswap.schemas.config import GlobalPolicy, ReplacementRule

logger = logging.getLogger("cmdswap")

TranslateFn = Callable[
    [tuple[str, ...], ReplacementRule, EnvironmentFacts, GlobalPolicy], list[str] | None
]


class ToolKind(StrEnum):
    GREP = "grep"
    FIND = "find"
    CAT = "cat"
    LS = "ls"
    SED = "sed"
    PS = "ps"


@dataclass
class CommandTranslator:
    kind: ToolKind
    description: str
    translate: TranslateFn
    semantic_risk: SemanticRiskPredicate | None = None
    alternatives: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

TRANSLATOR_REGISTRY: dict[ToolKind, CommandTranslator] = {}


def register_translator(translator: CommandTranslator) -> None:
    TRANSLATOR_REGISTRY[translator.kind] = translator


def get_translator(command: str) -> CommandTranslator | None:
    """Look up the translator for a source command name."""
    try:
        kind = ToolKind(command)
    except ValueError:
        return None
    return TRANSLATOR_REGISTRY.get(kind)


def apply_translator(
    kind: ToolKind,
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    translator = TRANSLATOR_REGISTRY.get(kind)
    if translator is None:
        raise ValueError(f"Unknown translator: {kind}")
    return translator.translate(tuple(args), rule, facts, policy)


def _map_simple_flags(
    args: tuple[str, ...],
    rule: ReplacementRule,
    policy: GlobalPolicy,
) -> list[str] | None:
    """Mapping, then preserve, then drop. Operands always pass through.

    Dropping an unknown flag is deliberate for the display-oriented tools
    (cat, ls, ps). Compatibility mode falls back instead.
    """
    tokens = expand_short_flags(args)
    if tokens is None:
        return None
    out: list[str] = []
    operands_only = False
    for arg in tokens:
        if operands_only or not is_flag(arg):
            out.append(arg)
        elif arg == "--":
            operands_only = True
            out.append(arg)
        elif arg in rule.flag_mappings:
            mapped = rule.flag_mappings[arg]
            if mapped:
                out.append(mapped)
        elif arg in rule.preserve_flags:
            out.append(arg)
        elif policy.compatibility_mode:
            logger.debug("flag=%s has no %s equivalent, falling back", arg, rule.replacement)
            return None
        else:
            logger.debug("flag=%s dropped for %s", arg, rule.replacement)
    return out


# ---------------------------------------------------------------------------
# grep -> rg
# ---------------------------------------------------------------------------

_GREP_CONTEXT_FLAGS = {
    "-A": "-A",
    "--after-context": "-A",
    "-B": "-B",
    "--before-context": "-B",
    "-C": "-C",
    "--context": "-C",
}

_GREP_VALUE_FLAGS = frozenset({"-e", "--regexp", "-f", "--file", "-m", "--max-count"})

_GREP_GLOB_FLAGS = ("--include", "--exclude", "--exclude-dir")

_GREP_IGNORE_OVERRIDES = frozenset({"--no-ignore", "--hidden", "-u", "--unrestricted"})

# Same spelling, different meaning in rg. Rewritten regardless of the rule.
_RG_SPELLINGS = {
    "-E": "",
    "--extended-regexp": "",
    "-G": "",
    "--basic-regexp": "",
    "-r": "",  # rg recurses by default; its -r is --replace
    "--recursive": "",
    "-R": "--follow",
    "--dereference-recursive": "--follow",
    "-L": "--files-without-match",  # rg -L is --follow
    "-h": "--no-filename",  # rg -h is --help
    "-s": "--no-messages",  # rg -s is --case-sensitive
    "-I": "",  # rg skips binary files already; its -I is --no-filename
    "-T": "",  # rg -T is --type-not
    "-y": "-i",
    "--color": "--color=auto",
    "--colour": "--color=auto",
}

GREP_INCOMPATIBLE_FLAGS = frozenset({
    "--null-data", "-z",
    "--line-buffered",
    "--mmap",
    "-U", "--binary",
    "-Z", "--null",
    "-d", "--directories",
    "-D", "--devices",
})


def _grep_glob(flag: str, value: str) -> list[str] | None:
    if has_expansion(value):
        return None
    pattern = strip_quotes(value)
    if flag == "--include":
        return ["--glob", pattern]
    if flag == "--exclude-dir":
        return ["--glob", f"!{pattern.rstrip('/')}/"]
    return ["--glob", f"!{pattern}"]


def _translate_grep(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    tokens = expand_short_flags(args, GREP_VALUE_LETTERS, GREP_VALUE_FLAGS)
    if tokens is None:
        return None

    out: list[str] = []
    # rg skips ignored and hidden files, grep does not
    if facts.inside_vcs and not _GREP_IGNORE_OVERRIDES.intersection(tokens):
        out.extend(["--no-ignore", "--hidden"])

    i = 0
    while i < len(tokens):
        arg = tokens[i]
        has_value = i + 1 < len(tokens)

        if arg == "--":
            out.extend(tokens[i:])
            break

        if not is_flag(arg):
            out.append(arg)
        elif arg in _GREP_CONTEXT_FLAGS:
            out.append(_GREP_CONTEXT_FLAGS[arg])
            if has_value:
                i += 1
                out.append(tokens[i])
        elif arg.startswith(tuple(f"{flag}=" for flag in _GREP_GLOB_FLAGS)):
            flag, _, value = arg.partition("=")
            glob = None if has_expansion(arg) else _grep_glob(flag, value)
            if glob is None:
                return None
            out.extend(glob)
        elif arg in _GREP_GLOB_FLAGS:
            if has_value:
                i += 1
                glob = _grep_glob(arg, tokens[i])
                if glob is None:
                    return None
                out.extend(glob)
        elif arg in _GREP_VALUE_FLAGS:
            out.append(arg)
            if has_value:
                i += 1
                out.append(tokens[i])
        elif arg in _RG_SPELLINGS:
            if _RG_SPELLINGS[arg]:
                out.append(_RG_SPELLINGS[arg])
        elif arg in rule.preserve_flags:
            out.append(arg)
        elif arg in rule.flag_mappings:
            mapped = rule.flag_mappings[arg]
            if mapped:
                out.append(mapped)
        elif arg in GREP_INCOMPATIBLE_FLAGS:
            logger.debug("grep flag=%s is incompatible with rg", arg)
            return None
        else:
            # Best effort: most remaining long options share rg's spelling
            out.append(arg)

        i += 1

    return out


# ---------------------------------------------------------------------------
# find -> fd
# ---------------------------------------------------------------------------

_FIND_PATTERN_PREDICATES = frozenset({"-name", "-iname", "-path", "-ipath"})

_FIND_PROBLEMATIC_FLAGS = frozenset({
    "-daystart", "-follow", "-regextype", "-warn", "-nowarn",
    "-mount", "-xdev", "-prune", "-quit",
    "-printf", "-fprintf", "-fprint", "-fls", "-ls", "-fprint0",
})

# fd-native flags that take a value when preserved
_FD_VALUE_FLAGS = frozenset({"-t", "--type", "-e", "--extension", "-E", "--exclude"})

_FIND_DEPTH_FLAGS = {"-maxdepth": "--max-depth", "-mindepth": "--min-depth"}

# fd matches against the absolute path with --full-path
_ANCHORED_GLOB = re.compile(r"^[/*]")


def _full_path_glob(pattern: str) -> str:
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if _ANCHORED_GLOB.match(pattern):
        return pattern
    return f"**/{pattern}"


def _translate_find(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    # find lists hidden and ignored entries; fd does not by default
    flags: list[str] = ["-H", "-I"]
    pattern: str | None = None
    search_paths: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]
        value = args[i + 1] if i + 1 < len(args) else None

        if arg in _FIND_PATTERN_PREDICATES:
            if value is None or pattern is not None:
                return None
            pattern = strip_matching_quotes(value)
            if arg in ("-iname", "-ipath"):
                flags.append(rule.flag_mappings.get("-iname") or "-i")
            if arg in ("-path", "-ipath"):
                flags.extend(["--full-path", "--glob"])
                pattern = _full_path_glob(pattern)
            else:
                flags.append("--glob")
            # A rewritten pattern is re-quoted, which would stop "$VAR" expanding
            if pattern is not value and has_expansion(value):
                return None
            i += 2
            continue

        if arg == "-type":
            if value not in FIND_TYPE_VALUES:
                return None
            flags.extend(["--type", FIND_TYPE_VALUES[value]])
            i += 2
            continue

        if arg in _FIND_DEPTH_FLAGS:
            if value is None:
                return None
            flags.extend([_FIND_DEPTH_FLAGS[arg], value])
            i += 2
            continue

        if arg == "-print":
            # Default action
            i += 1
            continue

        if not is_flag(arg):
            search_paths.append(arg)
        elif arg in rule.preserve_flags:
            flags.append(arg)
            if arg in _FD_VALUE_FLAGS and value is not None:
                flags.append(value)
                i += 1
        elif rule.flag_mappings.get(arg):
            flags.append(rule.flag_mappings[arg])
        elif arg in _FIND_PROBLEMATIC_FLAGS:
            logger.debug("find flag=%s has no fd equivalent", arg)
            return None
        else:
            logger.debug("find predicate=%s is not translated", arg)
            return None

        i += 1

    # fd reads its first positional as the pattern
    out: list[str] = []
    if pattern is not None:
        out.append(pattern)
    elif search_paths:
        out.append(".")
    out.extend(flags)
    out.extend(search_paths)
    if pattern is not None and not search_paths:
        out.append(".")
    return out


# ---------------------------------------------------------------------------
# cat -> bat
# ---------------------------------------------------------------------------


def _translate_cat(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    mapped = _map_simple_flags(args, rule, policy)
    if mapped is None:
        return None
    # Plain output, no header, grid or line numbers unless asked for
    return ["--style=plain", *mapped]


# ---------------------------------------------------------------------------
# ls -> eza / exa
# ---------------------------------------------------------------------------


def _translate_ls(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    return _map_simple_flags(args, rule, policy)


# ---------------------------------------------------------------------------
# sed -> sd
# ---------------------------------------------------------------------------

_SED_SUBSTITUTION = re.compile(r"^s/([^/]+)/([^/]*)/([gi]*)$")


def parse_sed_expression(expression: str) -> tuple[str, str, str] | None:
    """Split ``s/PATTERN/REPLACEMENT/FLAGS``. Any other shape returns None."""
    match = _SED_SUBSTITUTION.match(expression)
    if match is None:
        return None
    pattern, replacement, sed_flags = match.groups()
    return pattern, replacement, sed_flags


def _translate_sed(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    # sd receives pattern and replacement as separate quoted words
    if not args or has_expansion(args[0]):
        return None
    parsed = parse_sed_expression(args[0])
    if parsed is None:
        return None
    pattern, replacement, sed_flags = parsed
    operands = list(args[1:])

    if policy.compatibility_mode:
        # sd always replaces every match and edits file operands in place
        if sed_flags != "g" or operands:
            return None
    if any(is_flag(arg) for arg in operands):
        return None

    return [pattern, replacement, *operands]


# ---------------------------------------------------------------------------
# ps -> procs
# ---------------------------------------------------------------------------


_BSD_PS_OPTIONS = re.compile(r"^[A-Za-z]+$")


def _translate_ps(
    args: tuple[str, ...],
    rule: ReplacementRule,
    facts: EnvironmentFacts,
    policy: GlobalPolicy,
) -> list[str] | None:
    # BSD style "ps aux": procs would read the leading word as a search keyword
    if args and _BSD_PS_OPTIONS.match(args[0]):
        args = (f"-{args[0]}", *args[1:])
    return _map_simple_flags(args, rule, policy)


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


def init_default_translators() -> None:
    """Register the six built-in translators."""
    translators = [
        CommandTranslator(
            kind=ToolKind.GREP,
            description="grep -> rg with glob, context and ignore-file handling",
            translate=_translate_grep,
            semantic_risk=grep_semantic_risk,
        ),
        CommandTranslator(
            kind=ToolKind.FIND,
            description="find -> fd for name, path, type and depth predicates",
            translate=_translate_find,
            semantic_risk=find_semantic_risk,
        ),
        CommandTranslator(
            kind=ToolKind.CAT,
            description="cat -> bat with plain style",
            translate=_translate_cat,
        ),
        CommandTranslator(
            kind=ToolKind.LS,
            description="ls -> eza, or exa when eza is missing",
            translate=_translate_ls,
            alternatives=("exa",),
        ),
        CommandTranslator(
            kind=ToolKind.SED,
            description="sed s/PATTERN/REPLACEMENT/ -> sd PATTERN REPLACEMENT",
            translate=_translate_sed,
        ),
        CommandTranslator(
            kind=ToolKind.PS,
            description="ps -> procs",
            translate=_translate_ps,
        ),
    ]
    for translator in translators:
        register_translator(translator)
