"""
Tests for the trailing whitespace region finder.

Covers pattern construction, offending region detection, the empty-line
policy, active-line carving for highlighting, and ignored documents.
"""

import re

import pytest

from trailing_spaces.config import reset_to_defaults
from trailing_spaces.document import LineIndex
from trailing_spaces.errors import InvalidPatternError
from trailing_spaces.finder import (
    build_pattern, find_offending_regions, find_trailing_regions, should_ignore, split_for_active_line
)
from trailing_spaces.types import LineSpan, Region, TrailingRegions


def make_settings(**changes):
    return reset_to_defaults().replace(**changes)


def delete_regions(text, regions):
    for region in reversed(regions):
        text = text[:region.start] + text[region.end:]
    return text


class TestOffendingRegions:
    """Detection of deletable trailing whitespace."""

    def setup_method(self):
        self.settings = make_settings()

    def test_single_trailing_run(self):
        """Three trailing spaces after 'foo' form one region."""
        text = "foo   \nbar\n"
        result = find_trailing_regions(text, self.settings)

        assert result.offending == (Region(3, 6, 0),)
        assert result.offending[0].text(text) == "   "
        assert delete_regions(text, result.offending) == "foo\nbar\n"

    def test_empty_lines_excluded(self):
        """A whitespace-only line is not matched when includeEmptyLines is off."""
        text = "foo   \n   \nbar\n"
        settings = make_settings(include_empty_lines=False)

        result = find_trailing_regions(text, settings)

        assert result.offending == (Region(3, 6, 0),)

    def test_empty_lines_included(self):
        text = "foo   \n   \nbar\n"

        result = find_trailing_regions(text, self.settings)

        assert result.offending == (Region(3, 6, 0), Region(7, 10, 1))

    def test_tabs_and_last_line_without_newline(self):
        text = "a\t \nb  "

        regions = find_offending_regions(text, self.settings)

        assert [(r.start, r.end, r.line) for r in regions] == [(1, 3, 0), (5, 7, 1)]

    def test_crlf_line_endings_are_kept(self):
        """The carriage return of a CRLF line ending is never part of a region."""
        text = "foo  \r\nbar\r\n"

        regions = find_offending_regions(text, self.settings)

        assert regions == [Region(3, 5, 0)]
        assert delete_regions(text, regions) == "foo\r\nbar\r\n"

    def test_inner_whitespace_not_matched(self):
        assert find_offending_regions("a b\tc\n", self.settings) == []

    def test_zero_width_matches_dropped(self):
        """A pattern that can match nothing only yields non-empty regions."""
        settings = make_settings(regexp="[\\s]*")

        assert find_offending_regions("foo\nbar", settings) == []
        assert find_offending_regions("foo  \nbar", settings) == [Region(3, 5, 0)]

    def test_whitespace_pattern_spans_blank_lines(self):
        """With [\\s]+ trailing blank lines are swallowed into one region."""
        text = "foo  \n\n  \nbar"
        settings = make_settings(regexp="[\\s]+")

        regions = find_offending_regions(text, settings)

        assert regions == [Region(3, 9, 0)]
        assert delete_regions(text, regions) == "foo\nbar"

    def test_regions_match_pattern_exactly(self):
        text = "x = 1  \n\t\n  y\t\t\nz \n"
        for include_empty_lines in (True, False):
            settings = make_settings(include_empty_lines=include_empty_lines)
            for region in find_offending_regions(text, settings):
                assert region.start < region.end
                assert re.fullmatch(settings.regexp, region.text(text))

    def test_no_region_on_whitespace_only_lines_when_excluded(self):
        text = "  \nfoo \n\t\t\n"
        settings = make_settings(include_empty_lines=False)
        index = LineIndex(text)

        regions = find_offending_regions(text, settings)

        assert regions == [Region(6, 7, 1)]
        for region in regions:
            assert index.line_text(region.line).strip()

    def test_rescan_after_deletion_is_empty(self):
        text = "def f():  \n    return 1 \n\n   \nprint(f())\t\n"
        for include_empty_lines in (True, False):
            settings = make_settings(include_empty_lines=include_empty_lines)
            trimmed = delete_regions(text, find_offending_regions(text, settings))
            assert find_offending_regions(trimmed, settings) == []

    def test_invalid_pattern(self):
        settings = make_settings(regexp="[ \t")

        with pytest.raises(InvalidPatternError) as exc_info:
            find_trailing_regions("foo  \n", settings)

        assert exc_info.value.pattern == "[ \t"

    def test_build_pattern_is_memoised(self):
        assert build_pattern(self.settings) is build_pattern(make_settings())


class TestHighlightableRegions:
    """Carving the active line out of the highlightable regions."""

    def test_highlight_current_line_keeps_everything(self):
        text = "foo   \nbar  \n"
        result = find_trailing_regions(text, make_settings(), LineSpan(0, 7))

        assert result.highlightable == result.offending

    def test_no_active_line_keeps_everything(self):
        text = "foo   \nbar  \n"
        result = find_trailing_regions(text, make_settings(highlight_current_line=False))

        assert result.highlightable == result.offending

    def test_active_line_not_highlighted(self):
        """Regions on the active line are still deletable but not highlighted."""
        text = "foo   \nbar  \n"
        settings = make_settings(highlight_current_line=False)

        result = find_trailing_regions(text, settings, LineSpan(0, 7))

        assert len(result.offending) == 2
        assert result.highlightable == (Region(10, 12, 1),)

    def test_active_last_line_without_newline(self):
        text = "foo \nbar  "
        settings = make_settings(highlight_current_line=False)

        result = find_trailing_regions(text, settings, LineSpan(5, 10))

        assert result.highlightable == (Region(3, 4, 0),)

    def test_region_straddling_active_line_is_split(self):
        text = "foo  \n  \nbar"
        settings = make_settings(regexp="[\\s]+", highlight_current_line=False)
        index = LineIndex(text)
        offending = find_offending_regions(text, settings)

        assert offending == [Region(3, 8, 0)]
        assert list(split_for_active_line(offending, index.line_span(1), index)) == [Region(3, 6, 0)]
        assert list(split_for_active_line(offending, index.line_span(0), index)) == [Region(6, 8, 1)]

    def test_highlightable_never_inside_active_line(self):
        text = "a \n\n  \nb\t\n \n"
        settings = make_settings(regexp="[\\s]+", highlight_current_line=False)
        index = LineIndex(text)

        for line in range(index.line_count):
            span = index.line_span(line)
            result = find_trailing_regions(text, settings, span)
            for region in result.highlightable:
                assert not region.intersects(span)


class TestIgnoredDocuments:
    """Languages and schemes configured to be skipped."""

    def test_ignored_language(self):
        settings = make_settings(languages_to_ignore={"markdown"})

        assert should_ignore("markdown", "file", settings) is True
        assert find_trailing_regions("foo  \n", settings, language_id="markdown") is TrailingRegions.EMPTY

    def test_ignored_scheme(self):
        settings = make_settings()

        assert should_ignore("plaintext", "output", settings) is True
        assert find_trailing_regions("foo  \n", settings, scheme="output").is_empty

    def test_not_ignored(self):
        settings = make_settings(languages_to_ignore={"markdown"})

        assert should_ignore("python", "file", settings) is False
        assert should_ignore(None, None, settings) is False

    def test_empty_language_is_never_ignored(self):
        settings = make_settings(languages_to_ignore={""})

        assert should_ignore("", "file", settings) is False
