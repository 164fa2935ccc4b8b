"""Venue locator: resolve where a user is and rank nearby venues."""

__version__ = "0.1.0"
