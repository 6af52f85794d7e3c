"""Progressive aggregation of per-project tip totals."""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from showcase.errors import WebsimAPIError
from showcase.events import CreditsTotalUpdated, EventEmitter, ProjectTipsUpdated
from showcase.models import ProjectEntry
from showcase.sources.websim import WebsimClient


@dataclass
class AggregationResult:
    """Outcome of one stats aggregation."""

    total: int = 0
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [f"Credits: {self.total:,}", f"Projects: {len(self.succeeded)}"]
        if self.failed:
            parts.append(f"Failed: {len(self.failed)}")
        return " | ".join(parts)


class StatsAggregator:
    """Fetches every project's stats concurrently and publishes each result.

    Each arrival bumps the running total, announces the project's own tip
    figure, and writes ``tips_received`` onto the matching canonical entry.
    Arrival order is whatever the network gives.
    """

    def __init__(
        self,
        client: WebsimClient,
        emitter: Optional[EventEmitter] = None,
        max_concurrency: Optional[int] = None,
    ):
        """Initialize the aggregator.

        Args:
            client: API client used for ``/projects/{id}/stats``.
            emitter: Receives CreditsTotalUpdated / ProjectTipsUpdated events.
            max_concurrency: Bound on in-flight requests; None fans out fully.
        """
        self.client = client
        self.emitter = emitter if emitter is not None else EventEmitter()
        self.max_concurrency = max_concurrency
        self.total = 0

    async def aggregate(
        self,
        entries: list[ProjectEntry],
        canonical: Optional[list[ProjectEntry]] = None,
    ) -> AggregationResult:
        """Fetch stats for ``entries`` and wait until every request settles.

        Args:
            entries: Projects to fetch stats for.
            canonical: List whose entries receive ``tips_received``, matched by
                project id. Defaults to ``entries``.
        """
        targets = {entry.project_id: entry for entry in (canonical if canonical is not None else entries)}
        result = AggregationResult()
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        self.total = 0
        self.emitter.emit(CreditsTotalUpdated(total=0))

        async def fetch_one(entry: ProjectEntry) -> None:
            project_id = entry.project_id
            try:
                if semaphore is not None:
                    async with semaphore:
                        stats = await self.client.get_project_stats(project_id)
                else:
                    stats = await self.client.get_project_stats(project_id)
            except WebsimAPIError as e:
                logger.warning("Could not fetch stats for project {}: {}", project_id, e)
                result.failed.append(project_id)
                return

            tips = stats.tip_total
            target = targets.get(project_id)
            if target is not None:
                target.tips_received = tips

            self.total += tips
            result.total = self.total
            result.succeeded.append(project_id)
            self.emitter.emit(CreditsTotalUpdated(total=self.total))
            self.emitter.emit(ProjectTipsUpdated(project_id=project_id, tips=tips))

        await asyncio.gather(*(fetch_one(entry) for entry in entries))
        logger.info("Stats aggregated: {}", result)
        return result
