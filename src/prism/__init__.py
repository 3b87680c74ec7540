"""Prism - interactive multi-translation reader engine."""

__version__ = "0.1.0"
