"""Terminal UI for Showcase."""

from .app import RelationsScreen, ShowcaseApp

__all__ = ["RelationsScreen", "ShowcaseApp"]
