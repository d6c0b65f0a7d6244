"""
Document model for the trailing spaces engine.

``LineIndex`` maps character offsets to (line, character) positions and
back. ``TextDocument`` is the minimal stand-in for a host editor document:
its text, identity, language and URI scheme.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlparse
import re

from .types import LineSpan, Position

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    """Split ``text`` into lines, each keeping its terminator."""
    lines = []
    start = 0
    for match in _LINE_BREAK.finditer(text):
        lines.append(text[start:match.end()])
        start = match.end()
    if start < len(text):
        lines.append(text[start:])
    return lines


class LineIndex:
    """Line start table for a text, recognising \\r\\n, \\n and \\r."""

    def __init__(self, text: str):
        self.text = text
        self._starts: List[int] = [0]
        # Offset where each line's content ends (before the terminator)
        self._ends: List[int] = []
        for match in _LINE_BREAK.finditer(text):
            self._ends.append(match.start())
            self._starts.append(match.end())
        self._ends.append(len(text))

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_of(self, offset: int) -> int:
        """Return the 0-based line containing ``offset``."""
        offset = min(max(offset, 0), len(self.text))
        return bisect_right(self._starts, offset) - 1

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self.text))
        line = bisect_right(self._starts, offset) - 1
        # Offsets inside a \r\n pair map to the end of the line content
        character = min(offset, self._ends[line]) - self._starts[line]
        return Position(line, character)

    def offset_at(self, position: Position) -> int:
        line = min(max(position.line, 0), self.line_count - 1)
        start, end = self._starts[line], self._ends[line]
        return start + min(max(position.character, 0), end - start)

    def validate_position(self, position: Position) -> Position:
        """Clamp ``position`` into the document."""
        return self.position_at(self.offset_at(position))

    def line_span(self, line: int) -> LineSpan:
        """Span of ``line`` from its first character up to the start of the next line."""
        line = min(max(line, 0), self.line_count - 1)
        if line + 1 < self.line_count:
            return LineSpan(self._starts[line], self._starts[line + 1])
        return LineSpan(self._starts[line], len(self.text))

    def line_text(self, line: int) -> str:
        """Content of ``line`` without its terminator."""
        return self.text[self._starts[line]:self._ends[line]]


@dataclass
class TextDocument:
    """A document as seen by the engine."""
    uri: str
    text: str
    language_id: str = "plaintext"
    version: int = 1
    _index: Optional[LineIndex] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_path(cls, path, language_id: str = "plaintext") -> "TextDocument":
        """Open a file from disk as a ``file:`` document."""
        resolved = Path(path).resolve()
        with open(resolved, "r", encoding="utf-8", newline="") as f:
            text = f.read()
        return cls(uri=resolved.as_uri(), text=text, language_id=language_id)

    @classmethod
    def untitled(cls, name: str, text: str, language_id: str = "plaintext") -> "TextDocument":
        return cls(uri=f"untitled:{name}", text=text, language_id=language_id)

    @property
    def key(self) -> str:
        """Identity of the document across versions."""
        return self.uri

    @property
    def scheme(self) -> str:
        parsed = urlparse(self.uri)
        # Bare paths and Windows drive letters are plain files
        if len(parsed.scheme) <= 1:
            return "file"
        return parsed.scheme

    @property
    def is_untitled(self) -> bool:
        return self.scheme == "untitled"

    @property
    def path(self) -> Optional[str]:
        """Filesystem path of a ``file`` document, None otherwise."""
        if self.scheme != "file":
            return None
        parsed = urlparse(self.uri)
        if parsed.scheme == "file":
            return unquote(parsed.path)
        return self.uri

    @property
    def file_name(self) -> str:
        return self.path or self.uri

    @property
    def index(self) -> LineIndex:
        if self._index is None or self._index.text is not self.text:
            self._index = LineIndex(self.text)
        return self._index

    @property
    def line_count(self) -> int:
        return self.index.line_count

    def position_at(self, offset: int) -> Position:
        return self.index.position_at(offset)

    def offset_at(self, position: Position) -> int:
        return self.index.offset_at(position)

    def validate_position(self, position: Position) -> Position:
        return self.index.validate_position(position)

    def active_line_span(self, position: Position) -> LineSpan:
        """Span of the line holding the (clamped) caret ``position``."""
        return self.index.line_span(self.validate_position(position).line)

    def with_text(self, text: str) -> "TextDocument":
        """The same document after an edit."""
        return TextDocument(self.uri, text, self.language_id, self.version + 1)
