"""Optimistic aggregate statistics synchronization."""

__version__ = "0.1.0"
