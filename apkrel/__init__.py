"""Publish Android build artifacts to GitHub Releases."""

__version__ = "0.3.0"
