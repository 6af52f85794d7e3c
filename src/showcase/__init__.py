"""Showcase - creator profile viewer for Websim."""

__version__ = "0.1.0"
