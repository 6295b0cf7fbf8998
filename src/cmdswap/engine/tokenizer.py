"""Shell-word tokenizer for a single simple command.

Word splitting and quote removal follow POSIX rules. Nothing is expanded: each
word keeps the text it was written with, so operands such as ``*.py``,
``$HOME/x`` or ``~/src`` are handed back to the shell unchanged when the
command is rendered.

Only the first simple command is tokenized. Everything from the first unquoted
control operator or redirection (``|``, ``&&``, ``;``, ``>``, ``2>`` ...) is
kept verbatim as the command's tail.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from cmdswap.exceptions import ParseError

_OPERATOR_CHARS = "|&;<>"
_REDIRECT_CHARS = "<>"
# Subshells and backtick substitution span words; not supported
_UNSUPPORTED_CHARS = "()`"
# Backslash keeps its escaping meaning for these inside double quotes
_DQUOTE_ESCAPABLE = '$`"\\\n'


class Word(str):
    """A shell word's value that remembers its source text.

    ``expands`` is set when the source holds a ``$`` (or a backtick inside
    double quotes) outside single quotes.
    """

    raw: str
    expands: bool

    def __new__(cls, value: str, raw: str, expands: bool = False) -> Word:
        word = super().__new__(cls, value)
        word.raw = raw
        word.expands = expands
        return word


def has_expansion(token: str) -> bool:
    return isinstance(token, Word) and token.expands


@dataclass(frozen=True)
class ParsedCommand:
    """Ordered tokens of a command. The first token is the command name."""

    tokens: tuple[str, ...] = ()
    tail: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    @property
    def name(self) -> str:
        return self.tokens[0] if self.tokens else ""

    @property
    def args(self) -> tuple[str, ...]:
        return self.tokens[1:]


def tokenize(raw: str) -> ParsedCommand:
    """Split *raw* following POSIX quoting rules.

    Raises ParseError on unterminated quotes, a trailing escape, or subshell
    and backtick syntax.
    """
    if not raw or not raw.strip():
        return ParsedCommand()
    words, tail = _scan(raw)
    return ParsedCommand(tuple(words), tail)


def _scan(raw: str) -> tuple[list[Word], str]:
    words: list[Word] = []
    i, n = 0, len(raw)

    while i < n:
        if raw[i].isspace():
            i += 1
            continue

        start = i
        value: list[str] = []
        expands = False
        while i < n and not raw[i].isspace():
            ch = raw[i]
            if ch == "'":
                end = raw.find("'", i + 1)
                if end == -1:
                    raise ParseError(raw, "No closing quotation")
                value.append(raw[i + 1:end])
                i = end + 1
            elif ch == '"':
                i += 1
                while True:
                    if i >= n:
                        raise ParseError(raw, "No closing quotation")
                    c = raw[i]
                    if c == '"':
                        i += 1
                        break
                    if c == "\\" and i + 1 < n and raw[i + 1] in _DQUOTE_ESCAPABLE:
                        value.append(raw[i + 1])
                        i += 2
                        continue
                    if c in "$`":
                        expands = True
                    value.append(c)
                    i += 1
            elif ch == "\\":
                if i + 1 >= n:
                    raise ParseError(raw, "No escaped character")
                if raw[i + 1] != "\n":
                    value.append(raw[i + 1])
                i += 2
            elif ch in _OPERATOR_CHARS:
                written = raw[start:i]
                # "2>file": the fd number belongs to the redirection
                if ch in _REDIRECT_CHARS and written.isdigit():
                    return words, raw[start:].strip()
                if written:
                    words.append(Word("".join(value), written, expands))
                return words, raw[i:].strip()
            elif ch in _UNSUPPORTED_CHARS:
                raise ParseError(raw, f"unsupported shell syntax {ch!r}")
            else:
                if ch == "$":
                    expands = True
                value.append(ch)
                i += 1
        words.append(Word("".join(value), raw[start:i], expands))

    return words, ""


def render(tokens: list[str] | tuple[str, ...], tail: str = "") -> str:
    """Join tokens into a command string.

    Words taken from the input are emitted as written. Tokens built by a
    translator are shell-quoted when the shell would otherwise alter them.
    """
    parts = [token.raw if isinstance(token, Word) else shlex.quote(token) for token in tokens]
    if tail:
        parts.append(tail)
    return " ".join(parts)
