"""
Configuration Manager
====================

Manages localizer settings loaded from an optional JSON file.

    {
        "localizer_settings": {"root_folder": "ink", "file_pattern": "*.ink", "retag": false},
        "table_output_settings": {"csv_path": "out/strings.csv", "json_path": "", "po_path": ""}
    }
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from inklocalizer.core.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "inklocalizer.json"


@dataclass
class LocalizerSettings:
    """Scan and tagging settings."""
    root_folder: str = ""  # empty -> current working directory
    file_pattern: str = "*.ink"
    retag: bool = False  # regenerate every ID instead of keeping authored ones
    debug_retag_files: bool = False  # write <file>.txt instead of overwriting sources
    id_seed: Optional[int] = None  # fixed seed for reproducible IDs


@dataclass
class TableOutputSettings:
    """Export destinations. An empty path disables that export."""
    csv_path: str = ""
    json_path: str = ""
    po_path: str = ""

    @property
    def csv_enabled(self) -> bool:
        return bool(self.csv_path)

    @property
    def json_enabled(self) -> bool:
        return bool(self.json_path)

    @property
    def po_enabled(self) -> bool:
        return bool(self.po_path)

    def as_outputs(self) -> Dict[str, str]:
        """Enabled exports only, format -> path."""
        outputs: Dict[str, str] = {}
        if self.csv_enabled:
            outputs['csv'] = self.csv_path
        if self.json_enabled:
            outputs['json'] = self.json_path
        if self.po_enabled:
            outputs['po'] = self.po_path
        return outputs


def _filter_known(cls, data: Dict[str, Any], logger: logging.Logger) -> Dict[str, Any]:
    """Drop keys the dataclass doesn't know about."""
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return {k: v for k, v in data.items() if k in known}


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        self.logger = logging.getLogger(__name__)
        self.config_file = Path(config_file)

        self.localizer_settings = LocalizerSettings()
        self.table_output_settings = TableOutputSettings()

    def load_config(self, required: bool = False) -> bool:
        """Load configuration from file.

        A missing file keeps the defaults unless ``required`` is set; an
        unreadable or malformed file raises ConfigError.
        """
        if not self.config_file.exists():
            if required:
                raise ConfigError(f"Config file not found: {self.config_file}")
            self.logger.debug("Config file doesn't exist, using defaults")
            return False

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Error loading configuration {self.config_file}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Error loading configuration {self.config_file}: expected a JSON object")

        try:
            if 'localizer_settings' in config_data:
                data = _filter_known(LocalizerSettings, config_data['localizer_settings'], self.logger)
                self.localizer_settings = LocalizerSettings(**data)

            if 'table_output_settings' in config_data:
                data = _filter_known(TableOutputSettings, config_data['table_output_settings'], self.logger)
                self.table_output_settings = TableOutputSettings(**data)
        except (TypeError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration section in {self.config_file}: {e}") from e

        self.logger.info("Configuration loaded successfully")
        return True

    def save_config(self) -> bool:
        """Save configuration to file."""
        config_data = {
            'localizer_settings': asdict(self.localizer_settings),
            'table_output_settings': asdict(self.table_output_settings),
        }
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=4, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}")
            return False

        self.logger.info("Configuration saved successfully")
        return True

    def apply_overrides(self, **overrides: Any) -> None:
        """Apply non-None values (e.g. from CLI flags) onto the matching settings section."""
        for key, value in overrides.items():
            if value is None:
                continue
            if hasattr(self.localizer_settings, key):
                setattr(self.localizer_settings, key, value)
            elif hasattr(self.table_output_settings, key):
                setattr(self.table_output_settings, key, value)
            else:
                self.logger.warning(f"Unknown setting ignored: {key}")
