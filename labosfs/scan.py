"""Buffered character input with getline and a minimal scanf."""

from __future__ import annotations

import string
from typing import Protocol

BUF_SIZE = 256
NUMBER_WIDTH = 31
LONG_BITS = 32
LONG_MAX = 2 ** (LONG_BITS - 1) - 1
LONG_MIN = -(2 ** (LONG_BITS - 1))
ULONG_MAX = 2**LONG_BITS - 1

_WORD_DELIMS = " \t\n"
_SPACE = " \t\n\v\f\r"
_DIGITS = {10: set(string.digits), 16: set(string.hexdigits)}


class _Readable(Protocol):
    def read(self, size: int = ..., /) -> str: ...


def _to_long(text: str, base: int, signed: bool) -> int:
    s = text.lstrip(_SPACE)
    negative = False
    if s[:1] in ("+", "-"):
        negative = s[0] == "-"
        s = s[1:]
    valid = _DIGITS[base]
    if base == 16 and s[:2].lower() == "0x" and s[2:3] and s[2] in valid:
        s = s[2:]
    end = 0
    while end < len(s) and s[end] in valid:
        end += 1
    value = int(s[:end], base) if end else 0
    if signed:
        value = -value if negative else value
        return max(LONG_MIN, min(LONG_MAX, value))
    if value > ULONG_MAX:
        return ULONG_MAX
    return (-value) % (ULONG_MAX + 1) if negative else value


class Scanner:
    """Reads characters from a text stream in blocks of BUF_SIZE."""

    def __init__(self, stream: _Readable) -> None:
        self._stream = stream
        self._buf = ""
        self._head = 0

    def _peek(self) -> str:
        if self._head == len(self._buf):
            self._buf = self._stream.read(BUF_SIZE) or ""
            self._head = 0
            if not self._buf:
                return ""
        return self._buf[self._head]

    def getchar(self) -> str:
        """Return the next character, or "" at end of input."""
        ch = self._peek()
        if ch:
            self._head += 1
        return ch

    def _skip_space(self) -> None:
        while (ch := self._peek()) and ch in _SPACE:
            self._head += 1

    def _gets(self, limit: int | None, delims: str, discard: bool, keep_delim: bool) -> str:
        out: list[str] = []
        while limit is None or len(out) < limit:
            ch = self._peek()
            if ch in ("", "\0"):
                return "".join(out)
            if ch in delims:
                if keep_delim:
                    out.append(self.getchar())
                return "".join(out)
            out.append(self.getchar())
        if discard:
            while (ch := self._peek()) not in ("", "\0") and ch not in delims:
                self.getchar()
        return "".join(out)

    def getline(self, size: int) -> str:
        """Read up to size - 1 characters, stopping after a newline."""
        if size < 1:
            raise ValueError("size must be at least 1")
        return self._gets(size - 1, "\n", False, True)

    def scanf(self, format: str) -> list[int | str]:
        """Read values by format (%c %s %d %u %x); returns them in order.

        Conversions never fail: a missing number reads as 0 and a missing
        word as "". Unknown conversions and unmatched literals are skipped.
        """
        values: list[int | str] = []
        pos = 0
        while pos < len(format):
            ch = format[pos]
            if ch in _SPACE:
                self._skip_space()
            elif ch == "%":
                conv = format[pos + 1 : pos + 2]
                if conv == "c":
                    values.append(self.getchar())
                elif conv == "s":
                    self._skip_space()
                    values.append(self._gets(None, _WORD_DELIMS, True, False))
                elif conv in ("d", "u", "x"):
                    self._skip_space()
                    word = self._gets(NUMBER_WIDTH, _WORD_DELIMS, True, False)
                    base = 16 if conv == "x" else 10
                    values.append(_to_long(word, base, conv == "d"))
                else:
                    pos += 1
                    continue
                pos += 2
                continue
            elif ch == self._peek():
                self.getchar()
            pos += 1
        return values