"""Enzo: browse, compare and track crypto rewards cards."""

__version__ = "0.1.0"
