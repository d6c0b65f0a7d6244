"""
Trailing spaces session.

The layer between a host editor and the engine: it resolves the active
line from the caret, keeps the last result per document, holds the saved
copy of each document for the modified-lines filter, and turns regions into
deletions and save-time edits.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple
import logging

from .config import MatchSettings
from .document import TextDocument
from .errors import InvalidPatternError, SnapshotError
from .finder import build_pattern, find_trailing_regions, should_ignore
from .modified_lines import filter_by_modified_lines, modified_lines
from .types import Edit, LineSpan, Position, Region, TrailingRegions


def _read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def apply_edits(text: str, edits: List[Edit]) -> str:
    """Apply edits ordered bottom-to-top."""
    for edit in edits:
        text = edit.apply(text)
    return text


@dataclass(frozen=True)
class _CachedScan:
    text: str
    settings: MatchSettings
    active_line: Optional[LineSpan]
    result: TrailingRegions


@dataclass(frozen=True)
class DeletionResult:
    """Outcome of deleting the trailing spaces of a document."""
    text: str
    regions: List[Region]
    message: Optional[str] = None
    # Set when nothing could be scanned because the pattern is broken
    error: Optional[InvalidPatternError] = None

    @property
    def count(self) -> int:
        return len(self.regions)


class TrailingSpaces:
    """
    Highlights and deletes trailing spaces in documents.

    Settings are supplied whole, at construction or via ``update_settings``;
    the logger is injected so callers decide where messages go.
    """

    def __init__(self, settings: MatchSettings, logger: Optional[logging.Logger] = None,
                 read_text: Optional[Callable[[str], str]] = None):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self._read_text = read_text or _read_file
        # document key -> last scan (last write wins)
        self._cache: Dict[str, _CachedScan] = {}
        # document key -> text of the saved copy
        self._snapshots: Dict[str, str] = {}
        # (document key, pattern) pairs already reported as invalid
        self._reported: Set[Tuple[str, str]] = set()

    def update_settings(self, settings: MatchSettings) -> None:
        """Replace the settings; cached results are dropped."""
        self.settings = settings
        self._cache.clear()
        self._reported.clear()
        self.logger.debug("Configuration loaded")

    def forget(self, document: TextDocument) -> None:
        """Drop everything held for a closed document."""
        self._cache.pop(document.key, None)
        self._snapshots.pop(document.key, None)
        self._reported = {entry for entry in self._reported if entry[0] != document.key}

    # --- Snapshots ---

    def capture_snapshot(self, document: TextDocument) -> Optional[str]:
        """
        Read the saved copy of ``document`` from disk.

        Called when a document is opened or becomes active. Documents that
        are not plain files have no saved copy.

        Raises:
            SnapshotError: if the file cannot be read
        """
        if document.is_untitled or document.scheme != "file":
            return None
        path = document.path
        try:
            text = self._read_text(path)
        except OSError as e:
            raise SnapshotError(path, e) from e
        self._snapshots[document.key] = text
        self.logger.debug(f"Saved copy captured - {document.file_name}")
        return text

    def set_snapshot(self, document: TextDocument, text: str) -> None:
        """Use ``text`` as the saved copy of ``document``."""
        self._snapshots[document.key] = text

    def mark_saved(self, document: TextDocument) -> None:
        """Record that ``document`` was just written to disk as-is."""
        self.set_snapshot(document, document.text)

    def snapshot(self, document: TextDocument) -> Optional[str]:
        if document.key in self._snapshots:
            return self._snapshots[document.key]
        return self.capture_snapshot(document)

    # --- Regions ---

    def regions(self, document: TextDocument, selection: Optional[Position] = None) -> TrailingRegions:
        """
        Trailing space regions of ``document``.

        ``selection`` is the caret (selection end); its line is kept out of
        the highlightable regions when ``highlightCurrentLine`` is off.
        """
        settings = self.settings
        if should_ignore(document.language_id, document.scheme, settings):
            self.logger.info(
                f"File with language '{document.language_id}' and scheme '{document.scheme}' ignored"
                f" - {document.file_name}"
            )
            return TrailingRegions.EMPTY

        active_line = None
        if selection is not None and not settings.highlight_current_line:
            active_line = document.active_line_span(selection)

        cached = self._cache.get(document.key)
        if (settings.live_matching and cached is not None and cached.text == document.text
                and cached.settings == settings and cached.active_line == active_line):
            return cached.result

        try:
            result = find_trailing_regions(document.text, settings, active_line)
        except InvalidPatternError as e:
            self._report_invalid_pattern(document, e)
            return TrailingRegions.EMPTY

        self._cache[document.key] = _CachedScan(document.text, settings, active_line, result)
        return result

    def ranges_to_highlight(self, document: TextDocument, selection: Optional[Position] = None) -> List[Region]:
        return list(self.regions(document, selection).highlightable)

    def ranges_to_delete(self, document: TextDocument, modified_only: bool = False) -> List[Region]:
        """
        Offending regions to delete, in document order.

        With ``deleteModifiedLinesOnly`` (or ``modified_only``) only regions
        starting on lines changed since the saved copy are kept. Untitled
        documents and non-file schemes have no saved copy and are not
        filtered.
        """
        regions = list(self.regions(document).offending)
        if not regions:
            return regions

        if ((self.settings.delete_modified_lines_only or modified_only)
                and not document.is_untitled and document.scheme == "file"):
            lines = modified_lines(self.snapshot(document), document.text)
            regions = filter_by_modified_lines(regions, lines)
        return regions

    # --- Deletion ---

    def delete(self, document: TextDocument, modified_only: bool = False) -> DeletionResult:
        """
        Delete trailing spaces from ``document``, bottom to top.

        With a broken pattern the text is returned unchanged, without a
        status message, and ``error`` holds the pattern error.
        """
        if not should_ignore(document.language_id, document.scheme, self.settings):
            try:
                build_pattern(self.settings)
            except InvalidPatternError as e:
                self._report_invalid_pattern(document, e)
                return DeletionResult(document.text, [], None, e)

        regions = self.ranges_to_delete(document, modified_only)
        edits = [region.to_edit() for region in reversed(regions)]
        text = apply_edits(document.text, edits)
        message = self._show_status(document, len(regions), show_if_no_regions=True)
        return DeletionResult(text, regions, message)

    def edits_for_deletion(self, document: TextDocument) -> List[Edit]:
        """Edits that delete the trailing spaces of ``document``, bottom to top."""
        regions = self.ranges_to_delete(document)
        self._show_status(document, len(regions))
        return [region.to_edit() for region in reversed(regions)]

    def will_save(self, document: TextDocument) -> List[Edit]:
        """Edits to apply before ``document`` is saved; none unless ``trimOnSave``."""
        if not self.settings.trim_on_save:
            return []
        self.logger.debug(f"Will save - {document.file_name}")
        return self.edits_for_deletion(document)

    # --- Messages ---

    @staticmethod
    def status_message(count: int) -> str:
        if count > 0:
            return f"Deleting {count} trailing space region{'s' if count > 1 else ''}"
        return "No trailing spaces to delete!"

    def _show_status(self, document: TextDocument, count: int, show_if_no_regions: bool = False) -> Optional[str]:
        message = self.status_message(count)
        self.logger.info(f"{message} - {document.file_name}")
        if self.settings.show_status_bar_message and (count > 0 or show_if_no_regions):
            return message
        return None

    def _report_invalid_pattern(self, document: TextDocument, error: InvalidPatternError) -> None:
        key = (document.key, error.pattern)
        if key in self._reported:
            return
        self._reported.add(key)
        self.logger.error(f"{error} - {document.file_name}")
