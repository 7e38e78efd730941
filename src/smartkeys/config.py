"""User settings for the smart-key behaviors.

Settings live in a JSON file in the user's config directory. Keys are the
dotted option names (``"smartEnd.indentEmptyLine": false``); nested objects
(``{"smartEnd": {"indentEmptyLine": false}}``) are accepted as well. Every
option defaults to enabled.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import platformdirs

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


@dataclass
class SmartEndConfig:
    indent_empty_line: bool = True
    toggle_trimmed_end: bool = True


@dataclass
class SmartBackspaceConfig:
    handle_empty_line: bool = True
    handle_indent_zone: bool = True


@dataclass
class SmartEnterConfig:
    auto_insert_closing_brace: bool = True


@dataclass
class StructuredValueConfig:
    insert_terminator_on_enter: bool = True
    add_whitespace_after_separator: bool = True
    add_quotes_to_keys: bool = True


# dotted option name -> (section attribute, field attribute)
OPTIONS: dict[str, tuple[str, str]] = {
    "smartEnd.indentEmptyLine": ("smart_end", "indent_empty_line"),
    "smartEnd.toggleTrimmedEnd": ("smart_end", "toggle_trimmed_end"),
    "smartBackspace.handleEmptyLine": ("smart_backspace", "handle_empty_line"),
    "smartBackspace.handleIndentZone": ("smart_backspace", "handle_indent_zone"),
    "smartEnter.autoInsertClosingBrace": ("smart_enter", "auto_insert_closing_brace"),
    "structuredValue.insertTerminatorOnEnter": (
        "structured_value",
        "insert_terminator_on_enter",
    ),
    "structuredValue.addWhitespaceAfterSeparator": (
        "structured_value",
        "add_whitespace_after_separator",
    ),
    "structuredValue.addQuotesToKeys": ("structured_value", "add_quotes_to_keys"),
}


@dataclass
class SmartKeysConfig:
    smart_end: SmartEndConfig = field(default_factory=SmartEndConfig)
    smart_backspace: SmartBackspaceConfig = field(default_factory=SmartBackspaceConfig)
    smart_enter: SmartEnterConfig = field(default_factory=SmartEnterConfig)
    structured_value: StructuredValueConfig = field(
        default_factory=StructuredValueConfig
    )

    def get(self, option: str) -> bool:
        section, attr = OPTIONS[option]
        return getattr(getattr(self, section), attr)

    def set(self, option: str, value: bool) -> None:
        section, attr = OPTIONS[option]
        setattr(getattr(self, section), attr, value)

    def to_dict(self) -> dict[str, bool]:
        return {option: self.get(option) for option in OPTIONS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SmartKeysConfig:
        """Build a config from user data, ignoring anything unrecognized."""
        config = cls()
        for option, value in _flatten(data).items():
            if option not in OPTIONS:
                logger.warning("Unknown setting %r, ignoring", option)
                continue
            if not isinstance(value, bool):
                logger.warning(
                    "Setting %r must be true or false, got %r; ignoring", option, value
                )
                continue
            config.set(option, value)
        return config


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


def default_config_path() -> Path:
    return Path(platformdirs.user_config_dir("smartkeys")) / SETTINGS_FILE_NAME


def load_config(path: str | Path | None = None) -> SmartKeysConfig:
    """Load settings from *path* (default: the user config file).

    A missing, unreadable or malformed file yields the defaults.
    """
    settings_file = Path(path) if path is not None else default_config_path()
    if not settings_file.exists():
        return SmartKeysConfig()

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load settings from %s: %s", settings_file, e)
        return SmartKeysConfig()

    if not isinstance(data, dict):
        logger.warning("Settings file %s is not a JSON object, ignoring", settings_file)
        return SmartKeysConfig()

    return SmartKeysConfig.from_dict(data)


def save_config(config: SmartKeysConfig, path: str | Path | None = None) -> bool:
    """Write *config* atomically (temp file + rename). Returns success."""
    settings_file = Path(path) if path is not None else default_config_path()
    temp_file = settings_file.with_suffix(".tmp")
    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
        temp_file.replace(settings_file)
        return True
    except OSError as e:
        logger.warning("Could not save settings to %s: %s", settings_file, e)
        try:
            if temp_file.exists():
                temp_file.unlink()
        except OSError:
            pass
        return False
