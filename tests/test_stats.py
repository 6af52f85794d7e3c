"""Tests for progressive stats aggregation."""

import asyncio

import pytest

from showcase.errors import WebsimAPIError
from showcase.events import CreditsTotalUpdated, EventEmitter, ProjectTipsUpdated
from showcase.models import Project, ProjectEntry, ProjectStatsResponse
from showcase.stats import AggregationResult, StatsAggregator


def entries(*project_ids):
    return [ProjectEntry(project=Project(id=pid)) for pid in project_ids]


class FakeStatsClient:
    """Answers get_project_stats from a table, optionally gated per project."""

    def __init__(self, tips: dict, gates: dict = None, failing: tuple = ()):
        self.tips = tips
        self.gates = gates or {}
        self.failing = failing
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_project_stats(self, project_id):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            gate = self.gates.get(project_id)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
            if project_id in self.failing:
                raise WebsimAPIError("boom", status_code=500)
            return ProjectStatsResponse(total_tip_amount=self.tips[project_id])
        finally:
            self.in_flight -= 1


class TestStatsAggregator:
    """Tests for StatsAggregator."""

    @pytest.mark.asyncio
    async def test_progressive_events_follow_arrival_order(self):
        """Test B resolving before A and C first publishes B's tips alone."""
        gates = {pid: asyncio.Event() for pid in "ABC"}
        client = FakeStatsClient({"A": 5, "B": 20, "C": 7}, gates=gates)
        events = []
        aggregator = StatsAggregator(client, EventEmitter([events.append]))
        projects = entries("A", "B", "C")

        task = asyncio.create_task(aggregator.aggregate(projects))
        await asyncio.sleep(0)
        gates["B"].set()
        for _ in range(5):
            await asyncio.sleep(0)
        assert aggregator.total == 20
        assert [e.tips_received for e in projects] == [0, 20, 0]
        gates["C"].set()
        gates["A"].set()
        result = await task

        totals = [e.total for e in events if isinstance(e, CreditsTotalUpdated)]
        assert totals[:2] == [0, 20]
        assert totals[-1] == 32
        tips = [(e.project_id, e.tips) for e in events if isinstance(e, ProjectTipsUpdated)]
        assert tips[0] == ("B", 20)
        assert sorted(tips) == [("A", 5), ("B", 20), ("C", 7)]
        assert result.total == 32
        assert [e.tips_received for e in projects] == [5, 20, 7]

    @pytest.mark.asyncio
    async def test_tips_written_before_events(self):
        """Test listeners see the entry already updated."""
        projects = entries("A")
        seen = []

        def listener(event):
            if isinstance(event, ProjectTipsUpdated):
                seen.append(projects[0].tips_received)

        aggregator = StatsAggregator(FakeStatsClient({"A": 7}), EventEmitter([listener]))
        await aggregator.aggregate(projects)

        assert seen == [7]

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        """Test one failed project leaves the others and the total intact."""
        client = FakeStatsClient({"A": 5, "B": 0, "C": 10}, failing=("B",))
        projects = entries("A", "B", "C")

        result = await StatsAggregator(client).aggregate(projects)

        assert result.total == 15
        assert sorted(result.succeeded) == ["A", "C"]
        assert result.failed == ["B"]
        assert projects[1].tips_received == 0

    @pytest.mark.asyncio
    async def test_canonical_entries_receive_tips(self):
        """Test tips land on the canonical list even when fetching from a copy."""
        canonical = entries("A", "B")
        snapshot = [entry.model_copy() for entry in canonical]

        await StatsAggregator(FakeStatsClient({"A": 1, "B": 2})).aggregate(snapshot, canonical=canonical)

        assert [e.tips_received for e in canonical] == [1, 2]

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        """Test max_concurrency limits in-flight requests."""
        client = FakeStatsClient({pid: 1 for pid in "ABCDEF"})

        result = await StatsAggregator(client, max_concurrency=2).aggregate(entries(*"ABCDEF"))

        assert result.total == 6
        assert client.max_in_flight <= 2

    @pytest.mark.asyncio
    async def test_unbounded_fans_out(self):
        client = FakeStatsClient({pid: 1 for pid in "ABCD"})
        await StatsAggregator(client).aggregate(entries(*"ABCD"))
        assert client.max_in_flight == 4

    @pytest.mark.asyncio
    async def test_empty(self):
        events = []
        result = await StatsAggregator(FakeStatsClient({}), EventEmitter([events.append])).aggregate([])
        assert result.total == 0
        assert events == [CreditsTotalUpdated(total=0)]

    @pytest.mark.asyncio
    async def test_rerun_resets_total(self):
        aggregator = StatsAggregator(FakeStatsClient({"A": 3}))
        await aggregator.aggregate(entries("A"))
        result = await aggregator.aggregate(entries("A"))
        assert result.total == 3


class TestAggregationResult:
    """Tests for AggregationResult."""

    def test_str(self):
        result = AggregationResult(total=1500, succeeded=["a", "b"], failed=["c"])
        assert str(result) == "Credits: 1,500 | Projects: 2 | Failed: 1"

    def test_str_no_failures(self):
        assert str(AggregationResult()) == "Credits: 0 | Projects: 0"


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_subscribe_unsubscribe(self):
        received = []
        emitter = EventEmitter()
        emitter.subscribe(received.append)
        emitter.emit(CreditsTotalUpdated(total=1))
        emitter.unsubscribe(received.append)
        emitter.emit(CreditsTotalUpdated(total=2))
        assert received == [CreditsTotalUpdated(total=1)]
