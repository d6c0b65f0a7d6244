"""
Configuration management for the trailing spaces engine.

This module provides the flat settings record consumed by the engine,
the contributed defaults that the configuration layer overlays user files
on, and YAML loading/saving of configuration files.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional
import logging
import os

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_SECTION = "trailing-spaces"

CONFIG_NAMES = [
    ".trailing-spaces.yml",
    ".trailing-spaces.yaml",
    "trailing-spaces.yml",
    "trailing-spaces.yaml",
]

# logLevel value -> stdlib logging level
LOG_LEVELS = {
    "none": logging.CRITICAL + 1,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "log": logging.DEBUG,
}

# Defaults contributed by the host; user configuration is overlaid on these.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "logLevel": "warn",
    "includeEmptyLines": True,
    "highlightCurrentLine": True,
    "regexp": "[ \t]+",
    "liveMatching": True,
    "deleteModifiedLinesOnly": False,
    "syntaxIgnore": [],
    "schemeIgnore": ["output"],
    "trimOnSave": False,
    "showStatusBarMessage": True,
    "backgroundColor": "rgba(255,0,0,0.3)",
    "borderColor": "rgba(255,100,100,0.15)",
}

# (option key, attribute name, expected type)
_OPTIONS = [
    ("regexp", "regexp", str),
    ("includeEmptyLines", "include_empty_lines", bool),
    ("highlightCurrentLine", "highlight_current_line", bool),
    ("deleteModifiedLinesOnly", "delete_modified_lines_only", bool),
    ("liveMatching", "live_matching", bool),
    ("syntaxIgnore", "languages_to_ignore", list),
    ("schemeIgnore", "schemes_to_ignore", list),
    ("trimOnSave", "trim_on_save", bool),
    ("showStatusBarMessage", "show_status_bar_message", bool),
    ("logLevel", "log_level", str),
    ("backgroundColor", "background_color", str),
    ("borderColor", "border_color", str),
]


@dataclass(frozen=True)
class MatchSettings:
    """Settings for one invocation of the engine."""

    # Matching policy
    regexp: str
    include_empty_lines: bool
    highlight_current_line: bool
    delete_modified_lines_only: bool

    # Host behaviour
    live_matching: bool = True
    languages_to_ignore: FrozenSet[str] = field(default_factory=frozenset)
    schemes_to_ignore: FrozenSet[str] = field(default_factory=frozenset)
    trim_on_save: bool = False
    show_status_bar_message: bool = True
    log_level: str = "warn"

    # Decoration colours, passed through to the host untouched
    background_color: str = DEFAULT_SETTINGS["backgroundColor"]
    border_color: str = DEFAULT_SETTINGS["borderColor"]

    def __post_init__(self):
        object.__setattr__(self, "languages_to_ignore", frozenset(self.languages_to_ignore))
        object.__setattr__(self, "schemes_to_ignore", frozenset(self.schemes_to_ignore))
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                "logLevel", f"Unknown logLevel {self.log_level!r}, expected one of {sorted(LOG_LEVELS)}"
            )

    @property
    def pattern(self) -> str:
        """Alias of ``regexp``: the body of the whitespace pattern."""
        return self.regexp

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "MatchSettings":
        """
        Build settings from a flat mapping of option names.

        Every option must be present; nothing is defaulted here.

        Raises:
            ConfigurationError: if an option is missing, None, or mistyped
        """
        values = {}
        for key, attr, expected in _OPTIONS:
            value = mapping.get(key)
            if value is None:
                raise ConfigurationError(key)
            if expected is list:
                value = _string_list(key, value)
            elif not isinstance(value, expected):
                raise ConfigurationError(
                    key, f"Expected {expected.__name__} for {key}, got {type(value).__name__}"
                )
            values[attr] = value
        return cls(**values)

    def to_mapping(self) -> Dict[str, Any]:
        """Return the settings keyed by option name."""
        mapping = {}
        for key, attr, _ in _OPTIONS:
            value = getattr(self, attr)
            if isinstance(value, frozenset):
                value = sorted(value)
            mapping[key] = value
        return mapping

    def replace(self, **changes) -> "MatchSettings":
        return replace(self, **changes)


def _string_list(key: str, value: Any) -> List[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ConfigurationError(key, f"Expected a list of strings for {key}")
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise ConfigurationError(key, f"Expected a list of strings for {key}, got {item!r}")
    return items


def reset_to_defaults() -> MatchSettings:
    """Settings built from the contributed defaults only."""
    return MatchSettings.from_mapping(DEFAULT_SETTINGS)


def merge_settings(overrides: Optional[Mapping[str, Any]], base: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Overlay ``overrides`` on ``base`` (defaults when omitted), warning on unknown keys."""
    merged = dict(DEFAULT_SETTINGS if base is None else base)
    known = {key for key, _, _ in _OPTIONS}
    for key, value in (overrides or {}).items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{key}'")
            continue
        merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> MatchSettings:
    """
    Load configuration from file or use defaults.

    The file may hold the options at top level or under a
    ``trailing-spaces:`` section.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        MatchSettings instance

    Raises:
        ConfigurationError: if the file is missing, unreadable or malformed
    """
    if not config_path:
        return reset_to_defaults()

    if not os.path.exists(config_path):
        raise ConfigurationError("config", f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError("config", f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigurationError("config", f"Config file {config_path} must contain a mapping")

    section = file_config.get(CONFIG_SECTION, file_config)
    if not isinstance(section, dict):
        raise ConfigurationError(CONFIG_SECTION, f"'{CONFIG_SECTION}' in {config_path} must be a mapping")

    settings = MatchSettings.from_mapping(merge_settings(section))
    logger.debug(f"Configuration loaded from {config_path}")
    return settings


def save_config(settings: MatchSettings, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        settings: MatchSettings to save
        config_path: Path where to save the config
    """
    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump({CONFIG_SECTION: settings.to_mapping()}, f, default_flow_style=False, indent=2)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for files in this order:
    1. .trailing-spaces.yml
    2. .trailing-spaces.yaml
    3. trailing-spaces.yml
    4. trailing-spaces.yaml

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None


def python_log_level(log_level: str) -> int:
    """Translate a ``logLevel`` setting into a stdlib logging level."""
    try:
        return LOG_LEVELS[log_level]
    except KeyError:
        raise ConfigurationError("logLevel", f"Unknown logLevel {log_level!r}") from None


def configure_logging(log_level: str = "warn", stream=None) -> logging.Logger:
    """Attach a stream handler to the package logger at the given level."""
    package_logger = logging.getLogger("trailing_spaces")
    package_logger.setLevel(python_log_level(log_level))
    # Replace the handler installed by an earlier call
    for handler in list(package_logger.handlers):
        if handler.get_name() == "trailing_spaces":
            package_logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.set_name("trailing_spaces")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s - %(levelname)s - %(message)s"))
    package_logger.addHandler(handler)
    return package_logger
