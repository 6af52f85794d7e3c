"""FastAPI application exposing profile views as JSON."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel

from showcase import __version__
from showcase.config import ShowcaseConfig
from showcase.errors import IdentityError
from showcase.models import (
    ProjectEntry,
    RelationKind,
    SortBy,
    SortOrder,
    SortState,
    UserSummary,
)
from showcase.profile import ProfileController, StaticIdentityProvider
from showcase.sources import RelationCache, WebsimClient


class ProfileSummary(BaseModel):
    """Counts and totals of a profile."""

    username: str
    avatar_url: str
    followers: Optional[int] = None
    following: Optional[int] = None
    total_views: int = 0
    total_likes: int = 0
    total_credits: int = 0
    project_count: int = 0


def get_config() -> ShowcaseConfig:
    """Get application configuration."""
    return ShowcaseConfig.load()


async def get_client(config: ShowcaseConfig = Depends(get_config)) -> AsyncIterator[WebsimClient]:
    """Get a Websim client for the duration of one request."""
    async with WebsimClient(config.base_url) as client:
        yield client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # username -> followers/following lists, kept for the process lifetime.
    # Only usernames whose relation fetch returned users get an entry.
    app.state.relation_caches = {}
    yield


app = FastAPI(
    title="Showcase API",
    description="Creator profile views - counts, projects and tips",
    version=__version__,
    lifespan=lifespan,
)


def _cache_key(username: str) -> str:
    return username.strip().lstrip("@").lower()


def _controller(
    request: Request,
    username: str,
    client: WebsimClient,
    config: ShowcaseConfig,
) -> ProfileController:
    caches: dict[str, RelationCache] = request.app.state.relation_caches
    return ProfileController(
        client,
        StaticIdentityProvider(username),
        config,
        relation_cache=caches.get(_cache_key(username)),
    )


@app.get("/")
def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "Showcase API",
        "version": __version__,
        "description": "Creator profile viewer",
        "docs_url": "/docs",
    }


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/profiles/{username}", response_model=ProfileSummary)
async def get_profile(
    username: str,
    request: Request,
    with_stats: bool = Query(True, description="Fetch per-project tips"),
    client: WebsimClient = Depends(get_client),
    config: ShowcaseConfig = Depends(get_config),
) -> ProfileSummary:
    """Get a profile's counts and totals. Unavailable counts are null."""
    controller = _controller(request, username, client, config)
    try:
        context = await controller.load(with_stats=with_stats)
    except IdentityError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ProfileSummary(
        username=context.identity.username,
        avatar_url=context.identity.avatar_url(config.avatar_base_url),
        followers=context.follower_count,
        following=context.following_count,
        total_views=context.total_views,
        total_likes=context.total_likes,
        total_credits=context.total_credits,
        project_count=len(context.entries),
    )


@app.get("/profiles/{username}/projects", response_model=list[ProjectEntry])
async def get_projects(
    username: str,
    request: Request,
    sort_by: SortBy = Query(SortBy.LAST_UPDATED),
    order: SortOrder = Query(SortOrder.DESC),
    with_stats: bool = Query(True, description="Fetch per-project tips"),
    client: WebsimClient = Depends(get_client),
    config: ShowcaseConfig = Depends(get_config),
) -> list[ProjectEntry]:
    """List a profile's projects in the requested order."""
    controller = _controller(request, username, client, config)
    try:
        context = await controller.resolve()
    except IdentityError as e:
        raise HTTPException(status_code=404, detail=str(e))

    await controller.load_projects_and_stats(with_stats=with_stats)
    context.sort_state = SortState(by=sort_by, order=order)
    return controller.sorted_entries()


@app.get("/profiles/{username}/relations/{kind}", response_model=list[UserSummary])
async def get_relations(
    username: str,
    kind: RelationKind,
    request: Request,
    client: WebsimClient = Depends(get_client),
    config: ShowcaseConfig = Depends(get_config),
) -> list[UserSummary]:
    """List a profile's followers or following."""
    controller = _controller(request, username, client, config)
    try:
        users = await controller.relations(kind)
    except IdentityError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if users:
        caches: dict[str, RelationCache] = request.app.state.relation_caches
        caches.setdefault(_cache_key(username), controller.ctx.relation_cache)
    return users
