"""Profile page controller.

Owns the state of one profile view and runs its load sequence:
- resolve the profile owner once
- fetch follower count, following count and projects+stats concurrently
- re-project the project list whenever the sort changes
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

from loguru import logger

from showcase.config import ShowcaseConfig
from showcase.errors import IdentityError, TipError, WebsimAPIError
from showcase.events import (
    CountLoaded,
    CreditsTotalUpdated,
    EventEmitter,
    Listener,
    ProfileEvent,
    ProjectsLoaded,
)
from showcase.models import (
    Identity,
    ProjectEntry,
    RelationKind,
    SortBy,
    SortState,
    UserSummary,
)
from showcase.sorting import sort_projects
from showcase.sources import (
    ProjectsFetcher,
    RelationCache,
    RelationFetcher,
    filter_profile_projects,
    is_profile_project,
    to_entries,
)
from showcase.sources.websim import WebsimClient
from showcase.stats import AggregationResult, StatsAggregator


class IdentityProvider(Protocol):
    """Supplies the user whose profile is shown."""

    async def resolve(self) -> Identity: ...


class StaticIdentityProvider:
    """Identity given up front, e.g. from the command line."""

    def __init__(self, username: Optional[str]):
        self.username = username

    async def resolve(self) -> Identity:
        username = (self.username or "").strip().lstrip("@")
        if not username:
            raise IdentityError("Could not retrieve creator info.")
        return Identity(username=username)


@dataclass
class ProfileContext:
    """Everything one profile view knows. Counts are None when unavailable."""

    identity: Identity
    sort_state: SortState = field(default_factory=SortState)
    relation_cache: RelationCache = field(default_factory=RelationCache)
    entries: list[ProjectEntry] = field(default_factory=list)
    follower_count: Optional[int] = None
    following_count: Optional[int] = None
    total_views: int = 0
    total_likes: int = 0
    total_credits: int = 0
    profile_project_id: Optional[str] = None
    projects_loaded: bool = False


class ProfileController:
    """Loads a profile and serves the views built on it."""

    def __init__(
        self,
        client: WebsimClient,
        identity_provider: IdentityProvider,
        config: Optional[ShowcaseConfig] = None,
        listeners: Optional[list[Listener]] = None,
        relation_cache: Optional[RelationCache] = None,
    ):
        self.client = client
        self.identity_provider = identity_provider
        self.config = config or ShowcaseConfig()
        self.emitter = EventEmitter(listeners)
        self._relation_cache = relation_cache
        self.context: Optional[ProfileContext] = None
        self.projects = ProjectsFetcher(client, page_size=self.config.page_size)
        self.aggregator = StatsAggregator(
            client,
            emitter=self.emitter,
            max_concurrency=self.config.stats_concurrency,
        )
        self.emitter.subscribe(self._track_credits)
        self._relations: Optional[RelationFetcher] = None

    def subscribe(self, listener: Listener) -> None:
        self.emitter.subscribe(listener)

    @property
    def ctx(self) -> ProfileContext:
        if self.context is None:
            raise RuntimeError("Profile not initialized; call resolve() or load() first")
        return self.context

    async def resolve(self) -> ProfileContext:
        """Resolve the profile owner once and create the context.

        Raises:
            IdentityError: If the owner cannot be determined.
        """
        if self.context is None:
            identity = await self.identity_provider.resolve()
            self.context = ProfileContext(
                identity=identity,
                sort_state=self.config.sort_state,
                relation_cache=self._relation_cache or RelationCache(),
            )
            self._relations = RelationFetcher(
                self.client,
                self.context.relation_cache,
                avatar_base_url=self.config.avatar_base_url,
                page_size=self.config.page_size,
            )
        return self.context

    async def load(self, with_stats: bool = True) -> ProfileContext:
        """Run the full load sequence.

        The three flows are independent; a failure in one leaves the others
        untouched.

        Raises:
            IdentityError: If the owner cannot be determined.
        """
        context = await self.resolve()
        await asyncio.gather(
            self.load_count(RelationKind.FOLLOWERS),
            self.load_count(RelationKind.FOLLOWING),
            self.load_projects_and_stats(with_stats=with_stats),
        )
        return context

    async def load_count(self, kind: RelationKind) -> Optional[int]:
        """Load a followers/following count, degrading to None on failure."""
        context = self.ctx
        try:
            count: Optional[int] = await self.client.get_count(context.identity.username, kind)
        except WebsimAPIError as e:
            logger.error("Failed to load {} count: {}", kind.value, e)
            count = None

        if kind == RelationKind.FOLLOWERS:
            context.follower_count = count
        else:
            context.following_count = count
        self.emitter.emit(CountLoaded(kind=kind, count=count))
        return count

    async def load_projects(self) -> list[ProjectEntry]:
        """Fetch projects, drop profile containers and publish zero-tip entries."""
        context = self.ctx
        items = await self.projects.fetch_all(context.identity.username)

        profile_items = [item for item in items if is_profile_project(item)]
        if profile_items:
            context.profile_project_id = profile_items[0].project.id

        context.entries = to_entries(filter_profile_projects(items))
        context.total_views = sum(e.project.stats.views for e in context.entries)
        context.total_likes = sum(e.project.stats.likes for e in context.entries)
        context.total_credits = 0
        context.projects_loaded = True

        logger.info(
            "Loaded {} projects for @{} ({} profile containers skipped)",
            len(context.entries), context.identity.username, len(profile_items),
        )
        self.emitter.emit(ProjectsLoaded(
            entries=context.entries,
            total_views=context.total_views,
            total_likes=context.total_likes,
        ))
        return context.entries

    async def load_stats(self) -> AggregationResult:
        """Fetch tips for every loaded project, publishing as they arrive."""
        context = self.ctx
        return await self.aggregator.aggregate(list(context.entries), canonical=context.entries)

    async def load_projects_and_stats(self, with_stats: bool = True) -> None:
        await self.load_projects()
        if with_stats:
            await self.load_stats()

    def _track_credits(self, event: ProfileEvent) -> None:
        if isinstance(event, CreditsTotalUpdated) and self.context is not None:
            self.context.total_credits = event.total

    # Sorting

    def sorted_entries(self) -> list[ProjectEntry]:
        """Project entries in the current display order."""
        context = self.ctx
        return sort_projects(context.entries, context.sort_state)

    def set_sort_by(self, by: SortBy) -> list[ProjectEntry]:
        self.ctx.sort_state.by = by
        return self.sorted_entries()

    def toggle_sort_order(self) -> list[ProjectEntry]:
        self.ctx.sort_state.toggle_order()
        return self.sorted_entries()

    # Relations

    async def relations(self, kind: RelationKind) -> list[UserSummary]:
        """Followers or following of the profile owner, cached per process."""
        context = await self.resolve()
        return await self._relations.fetch(context.identity.username, kind)

    # Tipping

    async def tip(self) -> None:
        """Post the configured credit-bearing comment on the profile.

        Raises:
            TipError: If no profile project is known or the post fails.
        """
        context = self.ctx
        if context.profile_project_id is None:
            raise TipError(f"@{context.identity.username} has no profile project to tip")
        try:
            await self.client.post_comment(
                context.profile_project_id,
                content=self.config.tip_message,
                credits=self.config.tip_credits,
            )
        except WebsimAPIError as e:
            logger.error("Error tipping credits: {}", e)
            raise TipError(f"Error tipping credits: {e}") from e
        logger.info("Tipped {} credits to @{}", self.config.tip_credits, context.identity.username)
