"""Realms - a room-based single-player text adventure engine."""

__version__ = "0.1.0"
