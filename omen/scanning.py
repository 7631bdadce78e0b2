"""Small explicit state machines for multi-line constructs in raw source text.

Both trackers are fed one line at a time and never look ahead, so callers own
the line cursor and decide what to do with the lines a tracker consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

_TRIPLE_QUOTES = ('"""', "'''")


@dataclass
class TripleQuoteTracker:
    """Tracks triple-quoted strings across lines.

    States are *none* (``quote is None``) and *open* (``quote`` holds the
    delimiter). ``feed`` returns ``True`` when the line belongs to a string and
    must be ignored by declaration rules. Completed string content, joined with
    single spaces, is available from ``take_completed``.
    """

    quote: Optional[str] = None
    _parts: List[str] = field(default_factory=list)
    _completed: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.quote is not None

    def feed(self, line: str) -> bool:
        if self.quote is not None:
            if self.quote in line:
                head = line.split(self.quote, 1)[0].strip()
                if head:
                    self._parts.append(head)
                self._finish()
            else:
                self._parts.append(line.strip())
            return True

        quote = _first_delimiter(line)
        if quote is None:
            return False

        if line.count(quote) >= 2:
            self._completed = line.split(quote)[1].strip()
            return True

        self.quote = quote
        self._parts = []
        tail = line.split(quote, 1)[1].strip()
        if tail:
            self._parts.append(tail)
        return True

    def take_completed(self) -> Optional[str]:
        """Return the most recently completed string once, then forget it."""
        completed, self._completed = self._completed, None
        return completed

    def _finish(self) -> None:
        self._completed = " ".join(part for part in self._parts if part).strip()
        self._parts = []
        self.quote = None


def find_triple_quote(line: str) -> int:
    """Return the index of the first triple-quote delimiter, or -1."""
    positions = [line.find(q) for q in _TRIPLE_QUOTES if q in line]
    return min(positions) if positions else -1


def _first_delimiter(line: str) -> Optional[str]:
    position = find_triple_quote(line)
    if position == -1:
        return None
    return line[position : position + 3]


@dataclass
class ParenBalancer:
    """Accumulates text until parentheses opened so far are balanced again.

    Feed the first line starting at (or before) the opening parenthesis, then
    continuation lines while ``done`` is false. Parentheses inside string
    literals are counted too; callers treat the result as best effort.
    """

    depth: int = 0
    _chunks: List[str] = field(default_factory=list)
    _seen_open: bool = False

    @property
    def done(self) -> bool:
        return self._seen_open and self.depth <= 0

    @property
    def text(self) -> str:
        return " ".join(self._chunks)

    def feed(self, chunk: str) -> bool:
        """Add a chunk; return ``True`` once the outermost call is closed."""
        self._chunks.append(chunk.strip())
        for char in chunk:
            if char == "(":
                self.depth += 1
                self._seen_open = True
            elif char == ")":
                self.depth -= 1
        return self.done


def capture_balanced(text: str, open_index: int) -> str:
    """Return ``text`` from ``open_index`` (an opening paren) to its match.

    Without a match the rest of ``text`` is returned.
    """
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[open_index : index + 1]
    return text[open_index:]


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` outside of brackets and quotes; strip each part."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    in_quote: Optional[str] = None
    for char in text:
        if in_quote:
            current.append(char)
            if char == in_quote:
                in_quote = None
            continue
        if char in {'"', "'"}:
            in_quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


__all__ = [
    "ParenBalancer",
    "TripleQuoteTracker",
    "capture_balanced",
    "find_triple_quote",
    "split_top_level",
]
