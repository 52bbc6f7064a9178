"""Announce upcoming sunrises and sunsets for the current location."""

__version__ = "0.1.0"
