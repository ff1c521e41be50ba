"""Wordlist input: one fuzzing value per line of a file or of standard input."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Iterator
from typing import BinaryIO

from fuzzwell.models import Config

_EXT_RE = re.compile(r"%ext%", re.IGNORECASE)


def strip_comments(text: str) -> str | None:
    """Strip a trailing `` #`` comment; return None for a line that is only a comment."""
    if text.lstrip(" ").startswith("#"):
        return None
    index = text.find(" #")
    return text if index == -1 else text[:index]


def _read_lines(stream: BinaryIO) -> Iterator[str]:
    """Yield lines without their terminators; a final empty line is not yielded."""
    lines = stream.read().split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    for line in lines:
        if line.endswith(b"\r"):
            line = line[:-1]
        yield line.decode("utf-8", "surrogateescape")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


class WordlistInput:
    """Serves the words of a wordlist one position at a time.

    A path of ``-`` reads the list from standard input.
    """

    def __init__(self, keyword: str, path: str, config: Config) -> None:
        self.keyword = keyword
        self.config = config
        self.active = True
        self.position = 0
        if path == "-":
            self.data = list(self._words(_read_lines(sys.stdin.buffer)))
        else:
            with open(path, "rb") as stream:
                self.data = list(self._words(_read_lines(stream)))

    def _words(self, lines: Iterable[str]) -> Iterator[bytes]:
        config = self.config
        dirsearch = config.dir_search_compat and bool(config.extensions)
        for text in lines:
            if dirsearch and _EXT_RE.search(text):
                for ext in config.extensions:
                    yield _encode(_EXT_RE.sub(lambda _match, ext=ext: ext, text))
                continue
            if config.ignore_wordlist_comments:
                stripped = strip_comments(text)
                if stripped is None:
                    continue
                text = stripped
            yield _encode(text)
            if not dirsearch and self.keyword == "FUZZ" and config.extensions:
                for ext in config.extensions:
                    yield _encode(text + ext)

    def has_next(self) -> bool:
        """Tell whether words are left at the current position."""
        return self.position < len(self.data)

    def value(self) -> bytes:
        """Return the word at the current position."""
        return self.data[self.position]

    def increment_position(self) -> None:
        self.position += 1

    def reset_position(self) -> None:
        self.position = 0

    def total(self) -> int:
        """Return the number of words in the list."""
        return len(self.data)

    def enable(self) -> None:
        self.active = True

    def disable(self) -> None:
        self.active = False