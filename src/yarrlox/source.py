"""Source text representation and span tracking for diagnostics."""

from __future__ import annotations

import bisect
from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """A half-open range of character offsets within a source string."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def to(self, other: Span) -> Span:
        """Build a Span running from the start of this span to the end of `other`."""
        return Span(self.start, other.end)


class SourceText:
    """A source string with line/column access for diagnostics."""

    def __init__(self, content: str, filename: str = "<stdin>") -> None:
        self.filename = filename
        self.content = content
        self.lines = content.splitlines()
        self._line_starts = [0]
        for ix, ch in enumerate(content):
            if ch == '\n':
                self._line_starts.append(ix + 1)

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def location(self, offset: int) -> tuple[int, int]:
        """Map an offset to a 1-indexed (line, column) pair."""
        offset = max(0, min(offset, len(self.content)))
        line_ix = bisect.bisect_right(self._line_starts, offset) - 1
        return line_ix + 1, offset - self._line_starts[line_ix] + 1

    def span_text(self, span: Span) -> str:
        """Extract the text covered by a span."""
        return self.content[span.start:span.end]
