"""Small text tools: grep, wc, head, cat, echo and ls-style name padding."""

from __future__ import annotations

import errno
from dataclasses import dataclass
from typing import Iterable, Iterator, TextIO

from labosfs.mkfs import MAX_NAME

CHUNK = 4096
GREP_BUFSIZE = 1024
HEAD_LINES = 10
# a NUL ends a C string, so it separates words as well
WORD_SEPARATORS = " \r\t\n\v\0"


@dataclass(frozen=True)
class WordCount:
    """Line, word and character totals of one input."""

    lines: int
    words: int
    chars: int

    def format(self, name: str = "") -> str:
        """Render as the report line "lines words chars name"."""
        return f"{self.lines} {self.words} {self.chars} {name}"


def _matchhere(regex: str, text: str) -> bool:
    if not regex:
        return True
    if len(regex) > 1 and regex[1] == "*":
        return _matchstar(regex[0], regex[2:], text)
    if regex == "$":
        return not text
    if text and (regex[0] == "." or regex[0] == text[0]):
        return _matchhere(regex[1:], text[1:])
    return False


def _matchstar(c: str, regex: str, text: str) -> bool:
    pos = 0
    while True:
        if _matchhere(regex, text[pos:]):
            return True
        if pos < len(text) and (text[pos] == c or c == "."):
            pos += 1
            continue
        return False


def match(pattern: str, text: str) -> bool:
    """Search text for pattern; only ^ . * $ are special."""
    if pattern.startswith("^"):
        return _matchhere(pattern[1:], text)
    return any(_matchhere(pattern, text[start:]) for start in range(len(text) + 1))


def grep(pattern: str, stream: Iterable[str]) -> Iterator[str]:
    """Yield the newline-terminated lines of stream that match pattern.

    A final line without a newline is never reported, and a line longer
    than the read buffer ends the search.
    """
    for line in stream:
        if not line.endswith("\n") or len(line) > GREP_BUFSIZE - 1:
            return
        if match(pattern, line[:-1]):
            yield line


def wc(stream: TextIO) -> WordCount:
    """Count lines, words and characters of a text stream."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(CHUNK):
        chars += len(chunk)
        lines += chunk.count("\n")
        for ch in chunk:
            if ch in WORD_SEPARATORS:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return WordCount(lines, words, chars)


def head(stream: Iterable[str], lines: int = HEAD_LINES) -> Iterator[str]:
    """Yield the first `lines` lines of stream; the last may lack a newline."""
    if lines <= 0:
        return
    count = 0
    for line in stream:
        yield line
        if line.endswith("\n"):
            count += 1
            if count >= lines:
                return


def cat(streams: Iterable[TextIO], out: TextIO) -> None:
    """Copy every stream in turn to out."""
    for stream in streams:
        while chunk := stream.read(CHUNK):
            written = out.write(chunk)
            if written is not None and written != len(chunk):
                raise OSError(errno.EIO, "cat: write error")


def echo(args: Iterable[str]) -> str:
    """Return the arguments joined by spaces with a newline; nothing for no arguments."""
    args = list(args)
    if not args:
        return ""
    return " ".join(args) + "\n"


def fmtname(path: str) -> str:
    """Return the last path component, blank-padded to the directory name width."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= MAX_NAME:
        return name
    return name.ljust(MAX_NAME)