"""Core domain logic package.

This package contains the enzyme catalogue store and the option
synchronizer that keeps the selection lists in step with the settings.
Modules here must not import GUI frameworks (PySide6, Qt, etc.).
"""
