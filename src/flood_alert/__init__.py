"""Flood alerts for the Mill Valley - Sausalito bike path."""

__version__ = "0.1.0"
