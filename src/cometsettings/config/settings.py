"""
Application settings and configuration.

This module provides the settings objects and their persistence to disk.
Settings are stored as JSON in a platform-specific location:

- Windows: %APPDATA%/LocalLow/cometsettings/settings.json
- macOS: ~/Library/Application Support/cometsettings/settings.json
- Linux: ~/.config/cometsettings/settings.json

There is no global settings instance: the application creates one
SettingsManager and hands its settings object to whoever needs it.

Example:
    from cometsettings.config.settings import SettingsManager

    manager = SettingsManager()
    settings = manager.load()
    print(settings.search.search_enzyme_number)

    # Update search settings and save
    settings.search.allowed_missed_cleavages = 1
    manager.save()
"""

import json
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional
import logging

from ..core.enzyme_config import DEFAULT_ENZYME_INFO, clamp_missed_cleavages, normalize_enzyme_termini
from ..infrastructure.paths import get_persistent_data_directory


@dataclass
class SearchSettings:
    """Enzyme-related search settings, mirroring the comet.params keys."""

    search_enzyme_number: int = 1
    sample_enzyme_number: int = 1
    allowed_missed_cleavages: int = 2
    enzyme_termini: int = 2  # 1 semi-digested, 2 fully digested, 8 N-term, 9 C-term

    # Catalogue rows: "number,name,offset,break,no-break"
    enzyme_info: list[str] = field(default_factory=lambda: list(DEFAULT_ENZYME_INFO))

    def normalize(self) -> None:
        """Coerce out-of-range values the same way Comet does when reading params."""
        self.enzyme_termini = normalize_enzyme_termini(self.enzyme_termini)
        self.allowed_missed_cleavages = clamp_missed_cleavages(self.allowed_missed_cleavages)

    @classmethod
    def from_dict(cls, data: dict) -> 'SearchSettings':
        """
        Build search settings from a dictionary, ignoring unknown keys.

        Args:
            data: Dictionary as stored in the settings file.

        Returns:
            SearchSettings instance.
        """
        known = {f.name for f in fields(cls)}
        search = cls(**{k: v for k, v in data.items() if k in known})
        search.enzyme_info = list(search.enzyme_info)
        search.normalize()
        return search


@dataclass
class AppSettings:
    """Application-wide settings."""

    # Logging settings
    log_level: int = logging.INFO
    log_to_file: bool = True
    log_file_path: Optional[Path] = None  # None = log.txt in the data directory

    # UI settings
    theme: str = "dark_teal"  # Any qt_material theme name without the .xml suffix

    # Search settings
    search: SearchSettings = field(default_factory=SearchSettings)


class SettingsManager:
    """
    Manages loading and saving application settings.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        if config_file is None:
            data_dir = get_persistent_data_directory()
            config_file = data_dir / "settings.json"

        self.config_file = config_file
        self._settings = AppSettings()
        self._logger = logging.getLogger(__name__)

    def load(self) -> AppSettings:
        """
        Load settings from configuration file.

        Returns:
            The loaded settings object.
        """
        if not self.config_file.exists():
            self._logger.info(f"Settings file not found at {self.config_file}, using defaults")
            return self._settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Convert Path strings back to Path objects
            if data.get('log_file_path'):
                data['log_file_path'] = Path(data['log_file_path'])

            if isinstance(data.get('search'), dict):
                data['search'] = SearchSettings.from_dict(data['search'])
            else:
                data.pop('search', None)

            # Update settings with loaded data
            for key, value in data.items():
                if hasattr(self._settings, key):
                    setattr(self._settings, key, value)

            self._logger.info(f"Settings loaded from {self.config_file}")

        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse settings file: {e}. Using defaults.")
        except (OSError, TypeError, ValueError) as e:
            self._logger.error(f"Failed to load settings: {e}. Using defaults.")

        return self._settings

    def save(self, settings: Optional[AppSettings] = None) -> None:
        """
        Save settings to configuration file.

        Args:
            settings: Settings object to save. If None, saves current settings.

        Raises:
            OSError: If the file cannot be written.
        """
        if settings is not None:
            self._settings = settings

        # Ensure config directory exists
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        # Convert dataclass to dict
        data = asdict(self._settings)

        # Convert Path objects to strings with forward slashes for JSON serialization
        if data.get('log_file_path'):
            data['log_file_path'] = str(Path(data['log_file_path'])).replace('\\', '/')

        # Atomic write: write to temp file, then rename
        temp_file = self.config_file.with_suffix('.tmp')
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        # Replace old file with new file atomically
        temp_file.replace(self.config_file)

        self._logger.info(f"Settings saved to {self.config_file}")

    def get(self) -> AppSettings:
        """
        Get the current settings.

        Returns:
            The current settings object.
        """
        return self._settings

    def update(self, **kwargs) -> None:
        """
        Update specific settings and auto-save.

        Args:
            **kwargs: Setting names and values to update.
        """
        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)
            else:
                self._logger.warning(f"Ignoring unknown setting: {key}")

        # Auto-save after update
        self.save()

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values and save."""
        self._settings = AppSettings()
        self.save()
