"""Command-line parser for a small shell: words, redirections, pipes, lists, background jobs and blocks."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Union

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""


class RedirKind(Enum):
    """A redirection operator and the file access it implies."""

    INPUT = "<"
    OUTPUT = ">"
    APPEND = ">>"

    @property
    def fd(self) -> int:
        """Descriptor the opened file replaces."""
        return 0 if self is RedirKind.INPUT else 1

    @property
    def writable(self) -> bool:
        return self is not RedirKind.INPUT

    @property
    def create(self) -> bool:
        return self is not RedirKind.INPUT

    @property
    def truncate(self) -> bool:
        return self is RedirKind.OUTPUT

    @property
    def whence(self) -> int:
        """Where the file position is set after opening."""
        return os.SEEK_END if self is RedirKind.APPEND else os.SEEK_SET


@dataclass(frozen=True)
class ExecCmd:
    """Run a program; argv[0] names it. An empty argv runs nothing."""

    argv: tuple[str, ...]


@dataclass(frozen=True)
class RedirCmd:
    """Run cmd with one descriptor redirected to file."""

    cmd: Command
    file: str
    kind: RedirKind


@dataclass(frozen=True)
class PipeCmd:
    """Connect the output of left to the input of right."""

    left: Command
    right: Command


@dataclass(frozen=True)
class ListCmd:
    """Run left to completion, then right."""

    left: Command
    right: Command


@dataclass(frozen=True)
class BackCmd:
    """Run cmd without waiting for it."""

    cmd: Command


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


def _scan(line: str) -> list[tuple[str, int]]:
    """Split a line into tokens paired with their start offsets."""
    line = line.split("\0", 1)[0]
    tokens: list[tuple[str, int]] = []
    pos, end = 0, len(line)
    while True:
        while pos < end and line[pos] in WHITESPACE:
            pos += 1
        if pos >= end:
            return tokens
        start = pos
        ch = line[pos]
        if ch == ">":
            pos += 1
            if pos < end and line[pos] == ">":
                pos += 1
        elif ch in SYMBOLS:
            pos += 1
        else:
            while pos < end and line[pos] not in WHITESPACE and line[pos] not in SYMBOLS:
                pos += 1
        tokens.append((line[start:pos], start))


def tokenize(line: str) -> list[str]:
    """Return the tokens of a line: words and the operators | ( ) ; & < > >>."""
    return [text for text, _ in _scan(line)]


def _is_word(token: str) -> bool:
    return token[0] not in SYMBOLS


class _Parser:
    def __init__(self, line: str) -> None:
        self.line = line.split("\0", 1)[0]
        self.tokens = _scan(self.line)
        self.pos = 0

    def peek(self, chars: str) -> bool:
        if self.pos >= len(self.tokens):
            return False
        return self.tokens[self.pos][0][0] in chars

    def next(self) -> str | None:
        if self.pos >= len(self.tokens):
            return None
        token = self.tokens[self.pos][0]
        self.pos += 1
        return token

    def parse(self) -> Command:
        cmd = self.parse_line()
        if self.pos < len(self.tokens):
            rest = self.line[self.tokens[self.pos][1]:]
            raise ShellSyntaxError(f"leftovers: {rest}")
        return cmd

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.next()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.next()
            cmd = ListCmd(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.next()
            cmd = PipeCmd(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self) -> list[tuple[str, RedirKind]]:
        redirs = []
        while self.peek("<>"):
            op = self.next()
            target = self.next()
            if target is None or not _is_word(target):
                raise ShellSyntaxError("missing file for redirection")
            redirs.append((target, RedirKind(op)))
        return redirs

    @staticmethod
    def wrap(cmd: Command, redirs: list[tuple[str, RedirKind]]) -> Command:
        for file, kind in redirs:
            cmd = RedirCmd(cmd, file, kind)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.next()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.next()
        return self.wrap(cmd, self.parse_redirs())

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        argv: list[str] = []
        redirs = self.parse_redirs()
        while not self.peek("|)&;"):
            token = self.next()
            if token is None:
                break
            if not _is_word(token):
                raise ShellSyntaxError("syntax")
            argv.append(token)
            if len(argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            redirs += self.parse_redirs()
        return self.wrap(ExecCmd(tuple(argv)), redirs)


def parse_command(line: str) -> Command:
    """Parse one command line into a command tree."""
    return _Parser(line).parse()


def cd_target(line: str) -> str | None:
    """Return the directory of a built-in "cd " line, or None for any other line."""
    if not line.startswith("cd "):
        return None
    if line.endswith("\n"):
        line = line[:-1]
    return line[3:]