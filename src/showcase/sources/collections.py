"""Collection fetchers for a user's projects, followers and following."""

from typing import Optional

from loguru import logger

from showcase.config import DEFAULT_AVATAR_BASE_URL, MAX_PAGE_SIZE
from showcase.models import (
    FollowItem,
    ProjectEntry,
    ProjectListItem,
    RelationKind,
    UserSummary,
)
from showcase.sources.websim import WebsimClient


# Projects whose slug contains this are profile containers, not user content
PROFILE_SLUG_MARKER = "profile"


def is_profile_project(item: ProjectListItem) -> bool:
    """Check whether a project is a synthetic profile container."""
    slug = item.project.slug
    return bool(slug) and PROFILE_SLUG_MARKER in slug


def filter_profile_projects(items: list[ProjectListItem]) -> list[ProjectListItem]:
    """Drop profile-container projects, keeping order."""
    return [item for item in items if not is_profile_project(item)]


def to_entries(items: list[ProjectListItem]) -> list[ProjectEntry]:
    """Wrap fetched projects with a zero tip count."""
    return [
        ProjectEntry(project=item.project, project_revision=item.project_revision)
        for item in items
    ]


def to_user_summary(item: FollowItem, avatar_base_url: str = DEFAULT_AVATAR_BASE_URL) -> UserSummary:
    """Normalize a raw follow record into a UserSummary."""
    user = item.follow.user
    return UserSummary(
        cursor=item.cursor,
        username=user.username,
        avatar_url=user.avatar_url or f"{avatar_base_url.rstrip('/')}/{user.username}",
        is_admin=bool(user.is_admin),
    )


class ProjectsFetcher:
    """Fetches every posted project of a user."""

    def __init__(self, client: WebsimClient, page_size: int = MAX_PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    async def fetch_all(self, username: str) -> list[ProjectListItem]:
        """Fetch all posted projects, profile containers included."""
        path = f"/api/v1/users/{username}/projects"
        return await self.client.paginate(
            lambda cursor: (path, {"posted": "true"}),
            "projects",
            ProjectListItem,
            page_size=self.page_size,
        )

    async def fetch(self, username: str) -> list[ProjectEntry]:
        """Fetch posted projects as entries, without profile containers."""
        items = await self.fetch_all(username)
        return to_entries(filter_profile_projects(items))


class RelationCache:
    """Process-lifetime store of fetched followers/following lists.

    Entries are never invalidated; a new follow during the session shows up
    only after a restart.
    """

    def __init__(self) -> None:
        self._users: dict[RelationKind, list[UserSummary]] = {}

    def get(self, kind: RelationKind) -> Optional[list[UserSummary]]:
        return self._users.get(kind)

    def put(self, kind: RelationKind, users: list[UserSummary]) -> None:
        self._users[kind] = users

    def __contains__(self, kind: RelationKind) -> bool:
        return bool(self._users.get(kind))


class RelationFetcher:
    """Fetches followers/following lists through a RelationCache."""

    def __init__(
        self,
        client: WebsimClient,
        cache: Optional[RelationCache] = None,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
        page_size: int = MAX_PAGE_SIZE,
    ):
        self.client = client
        self.cache = cache if cache is not None else RelationCache()
        self.avatar_base_url = avatar_base_url
        self.page_size = page_size

    async def fetch(self, username: str, kind: RelationKind) -> list[UserSummary]:
        """Return the cached list for ``kind``, fetching it if absent or empty.

        A fresh result (partial or not) always replaces the cached value.
        """
        cached = self.cache.get(kind)
        if cached:
            return cached

        path = f"/api/v1/users/{username}/{kind.value}"
        items = await self.client.paginate(
            lambda cursor: (path, {}),
            kind.value,
            FollowItem,
            page_size=self.page_size,
        )
        users = [to_user_summary(item, self.avatar_base_url) for item in items]
        logger.debug("Fetched {} {} for @{}", len(users), kind.value, username)
        self.cache.put(kind, users)
        return users
