"""Stoop Politics - podcast publishing CMS."""

__version__ = "0.1.0"
