"""
Modified-lines filter.

Diffs the saved copy of a document against its current text, line by line,
and reports which lines of the current text were added or changed. Line
numbers are 0-based and always refer to the new text.
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Iterable, Iterator, List, Literal, Optional, Set

from .document import LineIndex, split_lines
from .types import Region

BlockKind = Literal["unchanged", "added", "removed"]


@dataclass(frozen=True)
class LineBlock:
    """A run of lines that a line diff reports as unchanged, added or removed."""
    kind: BlockKind
    count: Optional[int]

    @property
    def added(self) -> bool:
        return self.kind == "added"

    @property
    def removed(self) -> bool:
        return self.kind == "removed"


def diff_line_blocks(old_text: str, new_text: str) -> Iterator[LineBlock]:
    """
    Yield the change list between two texts at line granularity.

    A replaced run is reported as its removed lines followed by the added
    lines that took their place.
    """
    old_lines = split_lines(old_text)
    new_lines = split_lines(new_text)
    matcher = SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            yield LineBlock("unchanged", j2 - j1)
            continue
        if tag in ("delete", "replace"):
            yield LineBlock("removed", i2 - i1)
        if tag in ("insert", "replace"):
            yield LineBlock("added", j2 - j1)


def modified_lines_from_blocks(blocks: Iterable[LineBlock]) -> Set[int]:
    """Collect the new-text line numbers covered by added blocks."""
    line_number = 0
    edited: Set[int] = set()
    for block in blocks:
        if block.added:
            if block.count:
                edited.update(range(line_number, line_number + block.count))
            else:
                edited.add(line_number)
        # Removed lines do not exist in the new text
        if not block.removed and block.count:
            line_number += block.count
    return edited


def modified_lines(old_text: Optional[str], new_text: str) -> Set[int]:
    """
    Get the numbers of all lines of ``new_text`` that differ from ``old_text``.

    Args:
        old_text: The saved copy of the document, or None when the document
            has never been saved
        new_text: The current text of the document

    Returns:
        Set of 0-based line numbers; every line when there is no saved copy
    """
    if old_text is None:
        return set(range(LineIndex(new_text).line_count))
    if old_text == new_text:
        return set()
    return modified_lines_from_blocks(diff_line_blocks(old_text, new_text))


def filter_by_modified_lines(regions: Iterable[Region], lines: Set[int]) -> List[Region]:
    """Keep the regions whose start line is in ``lines``."""
    return [region for region in regions if region.line in lines]
