"""
Path utilities and constants.

This module provides helper functions for locating the files the
application keeps between sessions.
"""

import platform
from pathlib import Path

APP_NAME = "cometsettings"


def get_persistent_data_directory() -> Path:
    """
    Get the persistent data directory for the application (cross-platform).

    Returns:
        Path to the persistent data directory.

    Platform-specific locations:
        - Windows: %APPDATA%/LocalLow/cometsettings
        - macOS: ~/Library/Application Support/cometsettings
        - Linux: ~/.config/cometsettings
    """
    system = platform.system()

    if system == "Windows":
        base = Path.home() / "AppData" / "LocalLow"
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"

    data_dir = base / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)

    return data_dir


def get_settings_file_path() -> Path:
    """
    Get the path to the settings file.

    Returns:
        Path to the settings.json file.
    """
    return get_persistent_data_directory() / "settings.json"


def get_log_file_path() -> Path:
    """
    Get the path to the main log file.

    Returns:
        Path to the log.txt file.
    """
    return get_persistent_data_directory() / "log.txt"


def get_old_log_file_path() -> Path:
    """
    Get the path to the previous session's log file.

    Returns:
        Path to the log.old.txt file.
    """
    return get_persistent_data_directory() / "log.old.txt"
