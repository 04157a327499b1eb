"""
cometsettings - Enzyme settings editor for Comet searches.

This package provides the selection lists, enzyme catalogue editing and
settings reconciliation behind the enzyme page of the search settings dialog.
"""

__version__ = "0.1.0"
