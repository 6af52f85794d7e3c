"""Websim REST API client for Showcase.

This module provides functionality to:
- Issue async requests against the Websim v1 API
- Validate response envelopes at the boundary
- Walk cursor-paginated collections, keeping partial results on failure
"""

from typing import Any, Callable, Optional, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from showcase.config import DEFAULT_BASE_URL, MAX_PAGE_SIZE
from showcase.errors import MalformedResponseError, WebsimAPIError
from showcase.models import (
    CountEnvelope,
    Page,
    PageMeta,
    ProjectStatsResponse,
    RelationKind,
)


T = TypeVar("T", bound=BaseModel)

# Builds (path, query params) for the page following ``cursor``
PageRequestBuilder = Callable[[Optional[str]], tuple[str, dict[str, str]]]


class WebsimClient:
    """Async client for the Websim API. No retries: a failed request is final."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Websim client.

        Args:
            base_url: Origin serving ``/api/v1``.
            token: Optional bearer token, needed only for posting comments.
            timeout: Per-request timeout in seconds.
            transport: Optional transport override (used by tests).
        """
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "application/json",
                "User-Agent": "Showcase-Profile-Viewer",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WebsimClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and decode its JSON body.

        Raises:
            WebsimAPIError: On transport errors and non-2xx statuses.
            MalformedResponseError: If the body is not JSON.
        """
        logger.debug("{} {} {}", method, path, kwargs.get("params") or "")
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WebsimAPIError(
                f"HTTP error! status: {e.response.status_code} ({method} {path})",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise WebsimAPIError(f"Request failed: {method} {path}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from {path} is not JSON") from e

    async def get_json(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        """GET a JSON resource."""
        return await self._request("GET", path, params=params)

    async def post_json(self, path: str, payload: dict) -> Any:
        """POST a JSON payload and return the decoded response."""
        return await self._request("POST", path, json=payload)

    async def get_page(
        self,
        path: str,
        params: dict[str, str],
        collection: str,
        item_type: type[T],
    ) -> Page[T]:
        """Fetch and validate one page of ``collection``.

        Items that do not match ``item_type`` are logged and left out of the
        page.

        Raises:
            WebsimAPIError: If the request fails.
            MalformedResponseError: If the ``data``/``meta`` envelope is missing.
        """
        payload = await self.get_json(path, params=params)
        body = payload.get(collection) if isinstance(payload, dict) else None
        if not isinstance(body, dict):
            raise MalformedResponseError(f"Invalid {collection} data structure from API")
        data = body.get("data")
        if not isinstance(data, list):
            raise MalformedResponseError(f"Invalid {collection} data structure from API")
        try:
            meta = PageMeta.model_validate(body.get("meta"))
        except ValidationError as e:
            raise MalformedResponseError(
                f"Invalid {collection} data structure from API: {e.error_count()} error(s)"
            ) from e

        items = []
        for index, raw in enumerate(data):
            try:
                items.append(item_type.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid {} item {}: {} error(s)", collection, index, e.error_count()
                )
        return Page[item_type](data=items, meta=meta)

    async def paginate(
        self,
        build_request: PageRequestBuilder,
        collection: str,
        item_type: type[T],
        page_size: int = MAX_PAGE_SIZE,
    ) -> list[T]:
        """Walk every page of a cursor-paginated collection.

        The walk stops at the first failed or malformed page. Items from the
        pages fetched before it are returned; nothing is raised.

        Args:
            build_request: Maps the ``after`` cursor (None for the first page)
                to a request path and query params.
            collection: Envelope key holding the page (e.g. "projects").
            item_type: Schema each item is validated against.
            page_size: Items per request, capped at the API maximum.

        Returns:
            All items in server order.
        """
        items: list[T] = []
        cursor: Optional[str] = None
        pages = 0

        while True:
            path, params = build_request(cursor)
            query = dict(params)
            query["first"] = str(max(1, min(page_size, MAX_PAGE_SIZE)))
            if cursor:
                query["after"] = cursor

            try:
                page = await self.get_page(path, query, collection, item_type)
            except WebsimAPIError as e:
                logger.error(
                    "Failed to fetch {} (page {}, {} items kept): {}",
                    collection, pages + 1, len(items), e,
                )
                break

            pages += 1
            items.extend(page.data)

            if not page.meta.has_next_page:
                break
            if not page.meta.end_cursor:
                logger.warning(
                    "{} page {} reports more pages but no end_cursor; stopping",
                    collection, pages,
                )
                break
            cursor = page.meta.end_cursor

        return items

    async def get_count(self, username: str, kind: RelationKind) -> int:
        """Fetch the size of a user's followers/following collection.

        Raises:
            WebsimAPIError: If the request fails or the envelope is malformed.
        """
        payload = await self.get_json(
            f"/api/v1/users/{username}/{kind.value}", params={"count": "true"}
        )
        body = payload.get(kind.value) if isinstance(payload, dict) else None
        try:
            return CountEnvelope.model_validate(body).meta.count
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid {kind.value} count from API") from e

    async def get_project_stats(self, project_id: str) -> ProjectStatsResponse:
        """Fetch the detail stats of one project.

        Raises:
            WebsimAPIError: If the request fails or the body is malformed.
        """
        payload = await self.get_json(f"/api/v1/projects/{project_id}/stats")
        try:
            return ProjectStatsResponse.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid stats for project {project_id}") from e

    async def post_comment(self, project_id: str, content: str, credits: int) -> Any:
        """Post a comment carrying ``credits`` on a project."""
        return await self.post_json(
            f"/api/v1/projects/{project_id}/comments",
            {"content": content, "credits": credits},
        )
