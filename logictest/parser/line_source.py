"""
Line-by-line reader that keeps a 1-based count of the lines consumed.
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterable, Iterator


class LineScanner:
    """
    Wraps any iterable of text lines (an open file, a list of strings).

    `scan()` advances to the next line and returns False once input is
    exhausted; `text()` is the current line without its terminator and
    `line_num` the number of lines read so far. Lines cannot be pushed back.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(lines)
        self._text = ""
        self.line_num = 0

    @classmethod
    @contextlib.contextmanager
    def from_path(cls, path: Path | str) -> Iterator["LineScanner"]:
        with Path(path).open("r", encoding="utf-8") as f:
            yield cls(f)

    def scan(self) -> bool:
        try:
            line = next(self._lines)
        except StopIteration:
            return False
        self._text = line.rstrip("\r\n")
        self.line_num += 1
        return True

    def text(self) -> str:
        return self._text

    def __iter__(self) -> Iterator[str]:
        """Remaining lines, terminators stripped, advancing `line_num`."""
        while self.scan():
            yield self._text


__all__ = ["LineScanner"]
