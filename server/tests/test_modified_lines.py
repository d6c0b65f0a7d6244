"""
Tests for the modified-lines filter.
"""

from trailing_spaces.modified_lines import (
    LineBlock, diff_line_blocks, filter_by_modified_lines, modified_lines, modified_lines_from_blocks
)
from trailing_spaces.types import Region


class TestModifiedLines:
    """Line numbers of the new text that differ from the saved copy."""

    def test_changed_middle_line(self):
        """Replacing 'b' with 'X' marks only line 1."""
        assert modified_lines("a\nb\nc\n", "a\nX\nc\n") == {1}

    def test_identical_texts(self):
        assert modified_lines("a\nb\nc\n", "a\nb\nc\n") == set()

    def test_inserted_line(self):
        assert modified_lines("a\nc\n", "a\nb\nc\n") == {1}

    def test_deleted_line_marks_nothing(self):
        """Lines that only disappeared have no counterpart in the new text."""
        assert modified_lines("a\nb\nc\n", "a\nc\n") == set()

    def test_appended_line_without_newline(self):
        """Adding a terminator to the old last line changes that line too."""
        assert modified_lines("a\nb", "a\nb\nc") == {1, 2}

    def test_multi_line_replacement(self):
        assert modified_lines("a\nb\nc\nd\n", "a\nX\nY\nZ\nd\n") == {1, 2, 3}

    def test_crlf_line_endings(self):
        assert modified_lines("a\r\nb\r\nc\r\n", "a\r\nb  \r\nc\r\n") == {1}

    def test_no_saved_copy_marks_every_line(self):
        assert modified_lines(None, "a\nb\n") == {0, 1, 2}

    def test_modified_lines_exist_in_new_text(self):
        old = "one\ntwo\nthree\nfour\n"
        new = "zero\none\n2\nthree\nfive\nsix\n"

        lines = modified_lines(old, new)

        assert lines
        assert max(lines) < len(new.splitlines())


class TestLineBlocks:
    """The change list and the line counter that walks it."""

    def test_replace_yields_removed_then_added(self):
        blocks = list(diff_line_blocks("a\nb\nc\n", "a\nX\nc\n"))

        assert blocks == [
            LineBlock("unchanged", 1),
            LineBlock("removed", 1),
            LineBlock("added", 1),
            LineBlock("unchanged", 1),
        ]

    def test_removed_blocks_do_not_advance_counter(self):
        blocks = [LineBlock("unchanged", 1), LineBlock("removed", 5), LineBlock("added", 1)]

        assert modified_lines_from_blocks(blocks) == {1}

    def test_added_block_without_count_marks_one_line(self):
        blocks = [LineBlock("unchanged", 2), LineBlock("added", None), LineBlock("unchanged", 1)]

        assert modified_lines_from_blocks(blocks) == {2}

    def test_added_blocks_advance_counter(self):
        blocks = [LineBlock("added", 2), LineBlock("unchanged", 3), LineBlock("added", 1)]

        assert modified_lines_from_blocks(blocks) == {0, 1, 5}

    def test_empty_change_list(self):
        assert modified_lines_from_blocks([]) == set()


class TestFilterByModifiedLines:
    """Keeping regions that start on modified lines."""

    def test_keeps_regions_on_modified_lines(self):
        regions = [Region(3, 5, 0), Region(9, 10, 1), Region(14, 16, 2)]

        assert filter_by_modified_lines(regions, {1, 2}) == [Region(9, 10, 1), Region(14, 16, 2)]

    def test_multi_line_region_keyed_by_start_line(self):
        """A region running over several lines is judged by the line it starts on."""
        region = Region(3, 9, 0)

        assert filter_by_modified_lines([region], {1, 2}) == []
        assert filter_by_modified_lines([region], {0}) == [region]

    def test_no_modified_lines(self):
        assert filter_by_modified_lines([Region(0, 1, 0)], set()) == []
