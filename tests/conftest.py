"""Shared fixtures and API payload builders for Showcase tests."""

import json
from typing import Optional

import httpx
import pytest

from showcase.config import ShowcaseConfig


BASE_URL = "https://websim.com"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config reads and writes inside the test's temp directory."""
    config_path = tmp_path / ".showcase" / "config.json"
    monkeypatch.setattr(ShowcaseConfig, "get_config_path", classmethod(lambda cls: config_path))
    return config_path


def project_item(
    project_id: str,
    slug: Optional[str] = None,
    views: int = 0,
    likes: int = 0,
    comments: int = 0,
    updated_at: str = "2026-01-01T00:00:00Z",
    published_at: str = "2026-01-01T00:00:00Z",
    title: Optional[str] = None,
) -> dict:
    """Raw item as served by /users/{username}/projects."""
    return {
        "project": {
            "id": project_id,
            "title": title or f"Project {project_id}",
            "description": f"About {project_id}",
            "slug": slug or project_id,
            "stats": {"views": views, "likes": likes, "comments": comments},
            "domains": [],
            "updated_at": updated_at,
        },
        "project_revision": {
            "created_at": published_at,
            "current_screenshot_url": None,
            "site_id": f"site-{project_id}",
        },
    }


def follow_item(username: str, avatar_url: Optional[str] = None, is_admin: bool = False) -> dict:
    """Raw item as served by /users/{username}/followers and /following."""
    return {
        "cursor": f"c-{username}",
        "follow": {
            "user": {
                "username": username,
                "avatar_url": avatar_url,
                "is_admin": is_admin,
            },
        },
    }


def page(collection: str, items: list, has_next_page: bool = False, end_cursor: Optional[str] = None) -> dict:
    """A list response envelope."""
    return {
        collection: {
            "data": items,
            "meta": {"has_next_page": has_next_page, "end_cursor": end_cursor},
        },
    }


class PagedCollection:
    """Serves ``items`` in pages sized by the request's ``first`` param.

    Cursors are stringified offsets. Pages listed in ``fail_pages`` (1-based)
    answer with HTTP 500.
    """

    def __init__(self, collection: str, items: list, fail_pages: tuple[int, ...] = ()):
        self.collection = collection
        self.items = items
        self.fail_pages = fail_pages
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.requests) in self.fail_pages:
            return httpx.Response(500, json={"error": "boom"})
        size = int(request.url.params["first"])
        offset = int(request.url.params.get("after", "0"))
        chunk = self.items[offset:offset + size]
        end = offset + len(chunk)
        has_next = end < len(self.items)
        return httpx.Response(
            200,
            json=page(self.collection, chunk, has_next_page=has_next, end_cursor=str(end) if has_next else None),
        )


@pytest.fixture
def config() -> ShowcaseConfig:
    return ShowcaseConfig()


class FakeWebsim:
    """In-memory Websim API for tests that inject an httpx transport."""

    def __init__(
        self,
        projects: Optional[list] = None,
        followers: Optional[list] = None,
        following: Optional[list] = None,
        tips: Optional[dict] = None,
        counts: Optional[dict] = None,
    ):
        self.collections = {
            "projects": PagedCollection("projects", projects or []),
            "followers": PagedCollection("followers", followers or []),
            "following": PagedCollection("following", following or []),
        }
        self.tips = tips or {}
        self.counts = counts or {}
        self.comments: list[tuple[str, dict]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")
        # api / v1 / users|projects / <id> / <resource>
        if len(parts) != 5 or parts[:2] != ["api", "v1"]:
            return httpx.Response(404)
        _, _, scope, key, resource = parts

        if scope == "users" and resource in self.collections:
            if request.url.params.get("count") == "true":
                count = self.counts.get(resource, len(self.collections[resource].items))
                if count is None:
                    return httpx.Response(500)
                return httpx.Response(200, json={resource: {"meta": {"count": count}}})
            return self.collections[resource](request)

        if scope == "projects" and resource == "stats":
            return httpx.Response(200, json={"total_tip_amount": self.tips.get(key, 0)})

        if scope == "projects" and resource == "comments" and request.method == "POST":
            self.comments.append((key, json.loads(request.content)))
            return httpx.Response(201, json={"comment": {"id": "c1"}})

        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def websim() -> FakeWebsim:
    """A creator with two projects, a profile container and a few followers."""
    return FakeWebsim(
        projects=[
            project_item("p1", title="Snake", views=100, likes=10, comments=2),
            project_item("home", slug="alice-profile"),
            project_item("p2", title="Tetris", views=50, likes=20, comments=5),
        ],
        followers=[follow_item("bob"), follow_item("root", is_admin=True)],
        following=[follow_item("carol")],
        tips={"p1": 250, "p2": 1000},
    )
