"""Scenarist command-line interface."""
