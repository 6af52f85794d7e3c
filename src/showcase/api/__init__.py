"""JSON API for Showcase."""
