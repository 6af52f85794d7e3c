"""Pydantic schemas for Showcase profile data and Websim API envelopes."""

from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


T = TypeVar("T")

WEBSIM_URL = "https://websim.com"


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


class RelationKind(str, Enum):
    """The two social-graph collections of a user."""

    FOLLOWERS = "followers"
    FOLLOWING = "following"


class SortBy(str, Enum):
    """Keys the project grid can be ordered by."""

    LAST_UPDATED = "last_updated"  # project.updated_at
    LAST_PUBLISHED = "last_published"  # project_revision.created_at
    VIEW_COUNT = "view_count"
    LIKES = "likes"
    COMMENTS = "comments"
    CREDITS = "credits"  # tips received


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    """Current ordering of the project grid."""

    by: SortBy = SortBy.LAST_UPDATED
    order: SortOrder = SortOrder.DESC

    def toggle_order(self) -> None:
        self.order = SortOrder.ASC if self.order == SortOrder.DESC else SortOrder.DESC


class Identity(BaseModel):
    """The user whose profile is being shown."""

    model_config = ConfigDict(frozen=True)

    username: str

    def avatar_url(self, avatar_base_url: str) -> str:
        return f"{avatar_base_url.rstrip('/')}/{self.username}"


class ProjectStats(BaseModel):
    """Engagement counters reported with each project."""

    views: int = 0
    likes: int = 0
    comments: int = 0


class ProjectDomain(BaseModel):
    """A custom domain attached to a project."""

    name: str


class Project(BaseModel):
    """A published Websim project."""

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    stats: ProjectStats = Field(default_factory=ProjectStats)
    domains: list[ProjectDomain] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @field_validator("stats", mode="before")
    @classmethod
    def _null_stats(cls, value):
        return value if value is not None else {}

    @field_validator("domains", mode="before")
    @classmethod
    def _null_domains(cls, value):
        return value if value is not None else []

    @property
    def display_title(self) -> str:
        return self.title or "Untitled Project"

    @property
    def url(self) -> str:
        """Public URL: first custom domain, or the project page."""
        if self.domains:
            return f"https://{self.domains[0].name.replace('.websim.ai', '.websim.com')}"
        return f"{WEBSIM_URL}/p/{self.id}"


class ProjectRevision(BaseModel):
    """Latest published version of a project."""

    created_at: Optional[datetime] = None
    current_screenshot_url: Optional[str] = None
    site_id: Optional[str] = None

    def thumbnail_url(self, screenshot_base_url: str) -> Optional[str]:
        """Screenshot URL, falling back to the rendered site image."""
        if self.current_screenshot_url:
            return self.current_screenshot_url
        if self.site_id:
            return f"{screenshot_base_url.rstrip('/')}/{self.site_id}/600"
        return None


class ProjectEntry(BaseModel):
    """A project as manipulated by the profile page.

    ``tips_received`` starts at 0 and is written once by the stats
    aggregator when the project's stats arrive. Everything else is
    read-only after the initial fetch.
    """

    project: Project
    project_revision: ProjectRevision = Field(default_factory=ProjectRevision)
    tips_received: int = 0

    @property
    def project_id(self) -> str:
        return self.project.id


class UserSummary(BaseModel):
    """An item of a followers/following list."""

    model_config = ConfigDict(frozen=True)

    cursor: Optional[str] = None
    username: str
    avatar_url: str
    is_admin: bool = False

    @property
    def profile_url(self) -> str:
        return f"{WEBSIM_URL}/@{self.username}"


# =============================================================================
# API envelopes
# =============================================================================


class PageMeta(BaseModel):
    """Pagination metadata of a list response."""

    has_next_page: bool = False
    end_cursor: Optional[str] = None


class Page(BaseModel, Generic[T]):
    """One page of a cursor-paginated collection."""

    data: list[T]
    meta: PageMeta


class CountMeta(BaseModel):
    count: int


class CountEnvelope(BaseModel):
    """Body of a ``?count=true`` relation request."""

    meta: CountMeta


class ProjectListItem(BaseModel):
    """Raw item of ``/users/{username}/projects``."""

    project: Project
    project_revision: ProjectRevision = Field(default_factory=ProjectRevision)

    @field_validator("project_revision", mode="before")
    @classmethod
    def _null_revision(cls, value):
        return value if value is not None else {}


class FollowUser(BaseModel):
    username: str
    avatar_url: Optional[str] = None
    is_admin: Optional[bool] = None


class FollowRecord(BaseModel):
    user: FollowUser


class FollowItem(BaseModel):
    """Raw item of ``/users/{username}/followers`` and ``/following``."""

    cursor: Optional[str] = None
    follow: FollowRecord


class ProjectStatsResponse(BaseModel):
    """Body of ``/projects/{id}/stats``."""

    total_tip_amount: Optional[int] = None

    @property
    def tip_total(self) -> int:
        return self.total_tip_amount or 0
