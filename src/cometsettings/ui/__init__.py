"""PySide6 user interface package."""
