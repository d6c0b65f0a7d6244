"""
Core types for the trailing spaces engine.

This module provides the shared dataclasses used by the finder, the
modified-lines filter, and the session layer. All offsets are character
offsets into the document text (0-based); lines and columns are 0-based.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple


@dataclass(frozen=True, order=True)
class Position:
    """A (line, character) position inside a document."""
    line: int
    character: int


@dataclass(frozen=True)
class LineSpan:
    """Half-open offset span of a whole line, including its terminator."""
    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


@dataclass(frozen=True)
class Edit:
    """A replacement of the text between two offsets."""
    start: int
    end: int
    replacement: str = ""

    def apply(self, text: str) -> str:
        return text[:self.start] + self.replacement + text[self.end:]


@dataclass(frozen=True)
class Region:
    """A trailing whitespace span (start, end) starting on ``line``."""
    start: int
    end: int
    line: int = 0

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Empty region: ({self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def text(self, source: str) -> str:
        """Return the slice of ``source`` covered by the region."""
        return source[self.start:self.end]

    def intersects(self, span: LineSpan) -> bool:
        """Check whether the region shares at least one character with ``span``."""
        return self.start < span.end and span.start < self.end

    def to_edit(self) -> Edit:
        """Edit that deletes this region."""
        return Edit(self.start, self.end, "")


@dataclass(frozen=True)
class TrailingRegions:
    """Regions eligible for deletion and for highlighting.

    Every highlightable region is derived from an offending region; on the
    active line it may be narrower or missing entirely.
    """
    offending: Tuple[Region, ...] = ()
    highlightable: Tuple[Region, ...] = ()

    EMPTY: ClassVar["TrailingRegions"]

    @property
    def is_empty(self) -> bool:
        return not self.offending and not self.highlightable


TrailingRegions.EMPTY = TrailingRegions()
