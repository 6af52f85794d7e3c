"""Data models for Showcase."""

from .schemas import (
    CountEnvelope,
    CountMeta,
    FollowItem,
    FollowRecord,
    FollowUser,
    Identity,
    Page,
    PageMeta,
    Project,
    ProjectDomain,
    ProjectEntry,
    ProjectListItem,
    ProjectRevision,
    ProjectStats,
    ProjectStatsResponse,
    RelationKind,
    SortBy,
    SortOrder,
    SortState,
    UserSummary,
    utcnow,
)

__all__ = [
    "CountEnvelope",
    "CountMeta",
    "FollowItem",
    "FollowRecord",
    "FollowUser",
    "Identity",
    "Page",
    "PageMeta",
    "Project",
    "ProjectDomain",
    "ProjectEntry",
    "ProjectListItem",
    "ProjectRevision",
    "ProjectStats",
    "ProjectStatsResponse",
    "RelationKind",
    "SortBy",
    "SortOrder",
    "SortState",
    "UserSummary",
    "utcnow",
]
