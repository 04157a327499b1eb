"""
Main application entry point.

This module initializes the PySide6 application and shows the search
settings dialog.
"""

import sys

from PySide6.QtWidgets import QApplication, QMessageBox
from qt_material import apply_stylesheet

from cometsettings import __version__
from cometsettings.config.settings import SettingsManager
from cometsettings.infrastructure.logging_config import setup_logging, get_logger
from cometsettings.ui.search_settings_dialog import SearchSettingsDialog


logger = get_logger(__name__)


def apply_theme(app: QApplication, theme: str):
    """
    Apply a qt_material theme to the application.

    Args:
        app: The running application.
        theme: Theme name, with or without the .xml suffix.
    """
    if not theme.endswith('.xml'):
        theme = f"{theme}.xml"

    try:
        apply_stylesheet(app, theme=theme, invert_secondary=theme.startswith('light_'))
        logger.info(f"Theme applied: {theme}")
    except (OSError, ValueError) as e:
        logger.error(f"Failed to apply theme: {e}")


def main():
    """
    Main entry point for the GUI application.
    """
    settings_manager = SettingsManager()
    settings = settings_manager.load()
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file_path,
        log_to_file=settings.log_to_file
    )

    logger.info("Starting cometsettings application")

    app = QApplication(sys.argv)
    app.setApplicationName("cometsettings")
    app.setApplicationVersion(__version__)
    apply_theme(app, settings.theme)

    try:
        dialog = SearchSettingsDialog(settings_manager)
    except ValueError as e:
        logger.error(f"Cannot open search settings: {e}")
        QMessageBox.critical(None, "Search Settings", f"The stored search settings are invalid:\n{str(e)}")
        return 1

    result = dialog.exec()

    logger.info(f"Search settings dialog closed with result {result}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
