"""Publish Android apps to Google Play from CI."""

__version__ = "1.0.0"
