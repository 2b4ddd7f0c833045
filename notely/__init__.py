"""Handlers, SQLite storage and models for a JSON notes API authenticated by API key."""

__version__ = "0.1.0"