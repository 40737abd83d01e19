"""Mingle: a REST backend for a small social network."""

__version__ = "1.0.0"
