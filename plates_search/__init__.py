"""Plates: an Islamic knowledge answer engine grounded in web search."""

__version__ = "0.1.0"
