"""Websim data sources for Showcase."""

from .collections import (
    PROFILE_SLUG_MARKER,
    ProjectsFetcher,
    RelationCache,
    RelationFetcher,
    filter_profile_projects,
    is_profile_project,
    to_entries,
    to_user_summary,
)
from .websim import PageRequestBuilder, WebsimClient

__all__ = [
    "PROFILE_SLUG_MARKER",
    "PageRequestBuilder",
    "ProjectsFetcher",
    "RelationCache",
    "RelationFetcher",
    "WebsimClient",
    "filter_profile_projects",
    "is_profile_project",
    "to_entries",
    "to_user_summary",
]
