"""Roastah seller catalog edit service."""

__version__ = "0.1.0"
