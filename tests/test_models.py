"""Tests for Showcase pydantic models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import follow_item, page, project_item
from showcase.models import (
    CountEnvelope,
    FollowItem,
    Identity,
    Page,
    Project,
    ProjectEntry,
    ProjectListItem,
    ProjectRevision,
    ProjectStatsResponse,
    SortBy,
    SortOrder,
    SortState,
    UserSummary,
)


class TestProject:
    """Tests for Project."""

    def test_parse_api_item(self):
        """Test parsing a raw project list item."""
        item = ProjectListItem.model_validate(project_item("p1", views=10, likes=2, comments=1))
        assert item.project.id == "p1"
        assert item.project.stats.views == 10
        assert item.project.updated_at == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert item.project_revision.site_id == "site-p1"

    def test_null_fields_default(self):
        """Test null stats, domains and revision are tolerated."""
        item = ProjectListItem.model_validate({
            "project": {"id": "p1", "stats": None, "domains": None},
            "project_revision": None,
        })
        assert item.project.stats.views == 0
        assert item.project.domains == []
        assert item.project_revision.created_at is None

    def test_missing_id_rejected(self):
        """Test a project without id is invalid."""
        with pytest.raises(ValidationError):
            Project.model_validate({"title": "nope"})

    def test_display_title_fallback(self):
        """Test untitled projects get a placeholder title."""
        assert Project(id="p1").display_title == "Untitled Project"
        assert Project(id="p1", title="Snake").display_title == "Snake"

    def test_url_default(self):
        """Test URL without custom domains."""
        assert Project(id="p1").url == "https://websim.com/p/p1"

    def test_url_custom_domain(self):
        """Test first custom domain wins and .websim.ai is rewritten."""
        project = Project.model_validate({
            "id": "p1",
            "domains": [{"name": "snake.websim.ai"}, {"name": "other.websim.ai"}],
        })
        assert project.url == "https://snake.websim.com"


class TestProjectRevision:
    """Tests for ProjectRevision thumbnails."""

    def test_screenshot_url_preferred(self):
        revision = ProjectRevision(current_screenshot_url="https://img/x.png", site_id="s1")
        assert revision.thumbnail_url("https://images.websim.com/v1/site") == "https://img/x.png"

    def test_site_fallback(self):
        revision = ProjectRevision(site_id="s1")
        assert revision.thumbnail_url("https://images.websim.com/v1/site/") == (
            "https://images.websim.com/v1/site/s1/600"
        )

    def test_no_thumbnail(self):
        assert ProjectRevision().thumbnail_url("https://images.websim.com/v1/site") is None


class TestProjectEntry:
    """Tests for ProjectEntry."""

    def test_tips_default_zero(self):
        entry = ProjectEntry(project=Project(id="p1"))
        assert entry.tips_received == 0
        assert entry.project_id == "p1"


class TestUsers:
    """Tests for Identity and follow records."""

    def test_identity_avatar(self):
        identity = Identity(username="alice")
        assert identity.avatar_url("https://images.websim.com/avatar/") == (
            "https://images.websim.com/avatar/alice"
        )

    def test_identity_frozen(self):
        identity = Identity(username="alice")
        with pytest.raises(ValidationError):
            identity.username = "bob"

    def test_follow_item(self):
        item = FollowItem.model_validate(follow_item("bob", is_admin=True))
        assert item.follow.user.username == "bob"
        assert item.follow.user.is_admin is True
        assert item.cursor == "c-bob"

    def test_user_summary_profile_url(self):
        user = UserSummary(username="bob", avatar_url="https://a/bob")
        assert user.profile_url == "https://websim.com/@bob"
        assert user.is_admin is False


class TestEnvelopes:
    """Tests for API envelopes."""

    def test_page(self):
        body = page("projects", [project_item("p1")], has_next_page=True, end_cursor="abc")
        parsed = Page[ProjectListItem].model_validate(body["projects"])
        assert parsed.meta.has_next_page is True
        assert parsed.meta.end_cursor == "abc"
        assert parsed.data[0].project.id == "p1"

    def test_page_requires_meta(self):
        with pytest.raises(ValidationError):
            Page[ProjectListItem].model_validate({"data": []})

    def test_count_envelope(self):
        assert CountEnvelope.model_validate({"meta": {"count": 7}}).meta.count == 7

    def test_stats_response(self):
        assert ProjectStatsResponse.model_validate({"total_tip_amount": 500}).tip_total == 500
        assert ProjectStatsResponse.model_validate({"total_tip_amount": None}).tip_total == 0


class TestSortState:
    """Tests for SortState."""

    def test_defaults(self):
        state = SortState()
        assert state.by == SortBy.LAST_UPDATED
        assert state.order == SortOrder.DESC

    def test_toggle_order(self):
        state = SortState()
        state.toggle_order()
        assert state.order == SortOrder.ASC
        state.toggle_order()
        assert state.order == SortOrder.DESC
