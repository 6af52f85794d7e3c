"""Sort projection for the project grid."""

from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from showcase.models import ProjectEntry, SortBy, SortOrder, SortState


# Missing timestamps sort as the earliest instant
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

SortKey = Union[datetime, int]


def _timestamp(value: Optional[datetime]) -> datetime:
    if value is None:
        return EARLIEST
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_key(entry: ProjectEntry, by: SortBy) -> SortKey:
    """Extract the value ``entry`` is ordered by."""
    if by == SortBy.LAST_UPDATED:
        return _timestamp(entry.project.updated_at)
    if by == SortBy.LAST_PUBLISHED:
        return _timestamp(entry.project_revision.created_at)
    if by == SortBy.VIEW_COUNT:
        return entry.project.stats.views
    if by == SortBy.LIKES:
        return entry.project.stats.likes
    if by == SortBy.COMMENTS:
        return entry.project.stats.comments
    if by == SortBy.CREDITS:
        return entry.tips_received
    raise ValueError(f"Unknown sort key: {by}")


def sort_projects(entries: Sequence[ProjectEntry], state: SortState) -> list[ProjectEntry]:
    """Return a new list of ``entries`` ordered by ``state``.

    The input is never mutated. Equal keys keep their fetch order in both
    directions.
    """
    return sorted(
        entries,
        key=lambda entry: sort_key(entry, state.by),
        reverse=state.order == SortOrder.DESC,
    )
