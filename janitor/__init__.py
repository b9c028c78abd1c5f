"""Janitor - scheduled cleanup of unused AWS resources."""

__version__ = "0.3.0"
