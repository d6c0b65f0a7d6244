"""
Trailing whitespace region finder.

Scans document text with the configured pattern, collecting every span of
trailing whitespace as an offending (deletable) region, and derives the
highlightable regions by carving the active line out of them when the
current line must not be highlighted.
"""

from functools import lru_cache
from typing import Iterable, Iterator, List, Optional, Pattern
import logging
import re

from .config import MatchSettings
from .document import LineIndex
from .errors import InvalidPatternError
from .types import LineSpan, Region, TrailingRegions

logger = logging.getLogger(__name__)

# End of line as the host regex engine sees it in multiline mode
END_OF_LINE = r"(?=[\r\n\u2028\u2029]|\Z)"


def should_ignore(language_id: Optional[str], scheme_id: Optional[str], settings: MatchSettings) -> bool:
    """Check if a document's language or URI scheme is configured to be skipped."""
    if language_id and language_id in settings.languages_to_ignore:
        return True
    return bool(scheme_id) and scheme_id in settings.schemes_to_ignore


@lru_cache(maxsize=64)
def _compile(pattern: str, include_empty_lines: bool) -> Pattern:
    source = "(" + pattern + ")" + END_OF_LINE
    if not include_empty_lines:
        # At least one non-whitespace character must precede the span
        source = r"\S" + source
    try:
        return re.compile(source, re.MULTILINE)
    except re.error as e:
        raise InvalidPatternError(pattern, e) from e


def build_pattern(settings: MatchSettings) -> Pattern:
    """
    Compile the matching pattern for ``settings``.

    Group 1 of the compiled pattern is the exact span to remove.

    Raises:
        InvalidPatternError: if ``settings.regexp`` is not a valid expression
    """
    return _compile(settings.regexp, settings.include_empty_lines)


def find_offending_regions(text: str, settings: MatchSettings,
                           index: Optional[LineIndex] = None) -> List[Region]:
    """Find all trailing whitespace regions of ``text`` in document order."""
    regex = build_pattern(settings)
    if index is None:
        index = LineIndex(text)

    regions = []
    for match in regex.finditer(text):
        match_end = match.end()
        match_start = match_end - len(match.group(1))
        # A bare line ending matches with an empty group
        if match_start == match_end:
            continue
        regions.append(Region(match_start, match_end, index.line_of(match_start)))
    return regions


def split_for_active_line(regions: Iterable[Region], active_line: LineSpan,
                          index: LineIndex) -> Iterator[Region]:
    """Yield the parts of ``regions`` that lie outside ``active_line``."""
    for region in regions:
        if not region.intersects(active_line):
            yield region
            continue
        if region.start < active_line.start:
            yield Region(region.start, active_line.start, region.line)
        if region.end > active_line.end:
            yield Region(active_line.end, region.end, index.line_of(active_line.end))


def find_trailing_regions(text: str, settings: MatchSettings,
                          active_line: Optional[LineSpan] = None,
                          language_id: Optional[str] = None,
                          scheme: Optional[str] = None) -> TrailingRegions:
    """
    Compute the offending and highlightable trailing whitespace regions.

    Args:
        text: Full document text
        settings: Matching policy
        active_line: Span of the line holding the caret, if any
        language_id: Document language, checked against ``syntaxIgnore``
        scheme: Document URI scheme, checked against ``schemeIgnore``

    Returns:
        TrailingRegions; empty when the document is ignored

    Raises:
        InvalidPatternError: if the configured pattern does not compile
    """
    if should_ignore(language_id, scheme, settings):
        return TrailingRegions.EMPTY

    index = LineIndex(text)
    offending = tuple(find_offending_regions(text, settings, index))

    if settings.highlight_current_line or active_line is None:
        return TrailingRegions(offending, offending)

    highlightable = tuple(split_for_active_line(offending, active_line, index))
    logger.debug(f"Active line {active_line.start}-{active_line.end} excluded from highlighting")
    return TrailingRegions(offending, highlightable)
