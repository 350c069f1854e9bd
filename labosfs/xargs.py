"""Turn input lines into argument vectors for a fixed command."""

from __future__ import annotations

import re
from typing import Sequence

MAXARG = 31
_BLANKS = " \t"
_BLANK_RUN = re.compile(r"[ \t]+")


class TooManyArguments(ValueError):
    """Raised when a command line would exceed the argument limit."""


def parse_arg(line: str, base_argv: Sequence[str]) -> list[str]:
    """Return base_argv extended by the blank-separated words of line.

    Leading blanks stay attached to the first word, and a line of blanks
    alone becomes one argument.
    """
    argv = list(base_argv)
    if not line:
        return argv
    stripped = line.lstrip(_BLANKS)
    words = [word for word in _BLANK_RUN.split(stripped) if word]
    if words:
        words[0] = line[: len(line) - len(stripped)] + words[0]
    else:
        words = [line]
    argv.extend(words)
    if len(argv) > MAXARG:
        raise TooManyArguments("xargs: too many argv")
    return argv


def build_commands(text: str, base_argv: Sequence[str]) -> list[list[str]]:
    """Return one argument vector per non-empty line of text."""
    if not base_argv:
        raise ValueError("xargs: missing operand")
    text = text.split("\0", 1)[0]
    return [parse_arg(line, base_argv) for line in text.split("\n") if line]