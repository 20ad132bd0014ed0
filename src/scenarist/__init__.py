"""Scenarist — CSV-driven browser scenarios and declarative page extraction."""

__version__ = "0.3.0"
