"""
Trailing spaces engine package.

This package finds trailing whitespace regions in text documents, splits
them into regions to delete and regions to highlight, and restricts
deletion to lines modified since the document was last saved.
"""

from .types import (
    Position, LineSpan, Edit, Region, TrailingRegions
)

from .errors import (
    TrailingSpacesError, ConfigurationError, InvalidPatternError, SnapshotError
)

from .config import (
    MatchSettings, DEFAULT_SETTINGS, load_config, save_config, find_config_file,
    reset_to_defaults, configure_logging
)

from .document import LineIndex, TextDocument

from .finder import (
    build_pattern, find_offending_regions, split_for_active_line, find_trailing_regions, should_ignore
)

from .modified_lines import (
    LineBlock, diff_line_blocks, modified_lines, filter_by_modified_lines
)

from .session import TrailingSpaces, DeletionResult, apply_edits

__all__ = [
    # Types
    "Position", "LineSpan", "Edit", "Region", "TrailingRegions",

    # Errors
    "TrailingSpacesError", "ConfigurationError", "InvalidPatternError", "SnapshotError",

    # Config
    "MatchSettings", "DEFAULT_SETTINGS", "load_config", "save_config", "find_config_file",
    "reset_to_defaults", "configure_logging",

    # Documents
    "LineIndex", "TextDocument",

    # Region finder
    "build_pattern", "find_offending_regions", "split_for_active_line", "find_trailing_regions",
    "should_ignore",

    # Modified lines
    "LineBlock", "diff_line_blocks", "modified_lines", "filter_by_modified_lines",

    # Session
    "TrailingSpaces", "DeletionResult", "apply_edits",
]
