"""
Infrastructure layer package.

This package contains modules for interacting with the outside world:
- Enzyme record parsing and serialization
- comet.params import and export
- Logging configuration
- Path utilities

Modules here must not import GUI frameworks (PySide6, Qt, etc.).
"""
