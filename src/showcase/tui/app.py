"""Main Showcase TUI application."""

from typing import Optional

from loguru import logger
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Label,
    ListItem,
    ListView,
    Select,
    Static,
)

from showcase.config import SORT_OPTIONS, ShowcaseConfig, ViewState
from showcase.errors import IdentityError, TipError
from showcase.events import (
    CountLoaded,
    CreditsTotalUpdated,
    ProfileEvent,
    ProjectsLoaded,
    ProjectTipsUpdated,
)
from showcase.models import RelationKind, SortBy, SortOrder, UserSummary
from showcase.profile import ProfileController, StaticIdentityProvider
from showcase.relations import RelationBrowser
from showcase.sources import WebsimClient


DESCRIPTION_WIDTH = 40  # Characters of description shown in the grid


def _fmt(value: Optional[int]) -> str:
    return f"{value:,}" if value is not None else "N/A"


class UserListItem(ListItem):
    """A follower/following entry."""

    def __init__(self, user: UserSummary) -> None:
        super().__init__()
        self.user = user

    def compose(self) -> ComposeResult:
        badge = " [b reverse] Admin [/]" if self.user.is_admin else ""
        yield Label(f"@{self.user.username}{badge}", classes="user-name")
        yield Label(f"[dim]{self.user.profile_url}  {self.user.avatar_url}[/]", classes="user-url")


class RelationsScreen(ModalScreen):
    """Modal listing a profile's followers or following."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close"),
        Binding("o", "open_profile", "Open in Browser"),
    ]

    CSS = """
    RelationsScreen {
        align: center middle;
    }

    #relations-dialog {
        width: 70%;
        height: 80%;
        background: $surface;
        border: solid $primary;
    }

    #relations-header {
        height: auto;
        padding: 1;
        background: $primary-darken-2;
    }

    #relations-title {
        text-style: bold;
        width: 1fr;
    }

    #relations-list {
        height: 1fr;
    }

    UserListItem {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, kind: RelationKind, users: list[UserSummary], **kwargs):
        super().__init__(**kwargs)
        self.kind = kind
        self.users = users

    def compose(self) -> ComposeResult:
        with Vertical(id="relations-dialog"):
            with Horizontal(id="relations-header"):
                yield Static(
                    f"{self.kind.value.capitalize()} ({len(self.users):,})",
                    id="relations-title",
                )
                yield Button("✕", id="btn-close-relations", variant="default")
            if self.users:
                yield ListView(*(UserListItem(user) for user in self.users), id="relations-list")
            else:
                yield Static(f"No {self.kind.value} yet.", id="relations-empty")

    @on(Button.Pressed, "#btn-close-relations")
    def on_close_pressed(self) -> None:
        self.dismiss()

    def action_close(self) -> None:
        self.dismiss()

    def action_open_profile(self) -> None:
        lists = self.query(ListView)
        if not lists:
            return
        item = lists.first().highlighted_child
        if isinstance(item, UserListItem):
            import webbrowser
            webbrowser.open(item.user.profile_url)
            self.notify(f"Opening @{item.user.username}...")


class ShowcaseApp(App):
    """Showcase TUI: one creator's profile page."""

    TITLE = "Showcase"
    SUB_TITLE = "Creator Profile"

    CSS = """
    Screen {
        layout: vertical;
    }

    #profile-bar {
        height: 3;
        padding: 0 1;
        background: $primary-darken-2;
    }

    #username {
        text-style: bold;
        width: auto;
        padding: 1 2 0 0;
    }

    #avatar {
        color: $text-muted;
        width: 1fr;
        padding: 1 0 0 0;
    }

    #stats-bar {
        height: 3;
        padding: 0 1;
    }

    #stats-bar Button {
        min-width: 16;
        margin: 0 1 0 0;
    }

    #stats-bar Static {
        width: auto;
        padding: 1 2;
    }

    #sort-bar {
        height: 3;
        padding: 0 1;
    }

    #select-sort {
        width: 30;
    }

    #projects-table {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("f", "show_followers", "Followers"),
        Binding("g", "show_following", "Following"),
        Binding("s", "cycle_sort", "Sort"),
        Binding("o", "toggle_order", "Order"),
        Binding("t", "tip", "Tip"),
        Binding("enter", "open_project", "Open", show=False),
    ]

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        config: Optional[ShowcaseConfig] = None,
        client: Optional[WebsimClient] = None,
    ):
        super().__init__()
        self._config = config or ShowcaseConfig.load()
        self.theme = self._config.theme
        self.client = client or WebsimClient(self._config.base_url, token=token)
        self.controller = ProfileController(
            self.client,
            StaticIdentityProvider(username),
            self._config,
            listeners=[self.on_profile_event],
        )
        self.browser: RelationBrowser[str] = RelationBrowser(
            self.controller.relations, self._install_relations_screen
        )
        self.username = username

    def compose(self) -> ComposeResult:
        yield Header()

        with Horizontal(id="profile-bar"):
            yield Static(f"@{self.username}", id="username")
            yield Static("", id="avatar")

        with Horizontal(id="stats-bar"):
            yield Button("👥 Followers …", id="stat-followers", variant="default")
            yield Button("➡ Following …", id="stat-following", variant="default")
            yield Static("👁️ …", id="stat-views")
            yield Static("❤️ …", id="stat-likes")
            yield Button("💎 0", id="stat-credits", variant="primary")

        with Horizontal(id="sort-bar"):
            sort = self._config.sort_state
            yield Select(
                [(label, key.value) for key, label in SORT_OPTIONS],
                value=sort.by.value,
                id="select-sort",
                allow_blank=False,
            )
            yield Button(self._order_label(sort.order), id="btn-sort-order", variant="default")

        yield DataTable(id="projects-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#projects-table", DataTable)
        table.add_column("Title", key="title", width=30)
        table.add_column("Description", key="description", width=DESCRIPTION_WIDTH)
        table.add_column("Views", key="views")
        table.add_column("Likes", key="likes")
        table.add_column("Comments", key="comments")
        table.add_column("Tips", key="tips")
        table.add_column("URL", key="url")
        table.cursor_type = "row"

        self.load_profile()

    async def on_unmount(self) -> None:
        await self.client.aclose()

    @work(exclusive=True, group="load")
    async def load_profile(self) -> None:
        """Resolve the creator, then load counts, projects and stats."""
        try:
            context = await self.controller.resolve()
        except IdentityError as e:
            logger.error("Could not resolve profile: {}", e)
            self.exit(return_code=1, message=str(e))
            return

        username = context.identity.username
        self.query_one("#username", Static).update(f"@{username}")
        self.query_one("#avatar", Static).update(
            context.identity.avatar_url(self._config.avatar_base_url)
        )
        await self.controller.load()

    # Event handling

    def on_profile_event(self, event: ProfileEvent) -> None:
        """Apply a controller event to the affected widgets only."""
        if isinstance(event, CountLoaded):
            if event.kind == RelationKind.FOLLOWERS:
                self.query_one("#stat-followers", Button).label = f"👥 Followers {_fmt(event.count)}"
            else:
                self.query_one("#stat-following", Button).label = f"➡ Following {_fmt(event.count)}"
        elif isinstance(event, ProjectsLoaded):
            self.query_one("#stat-views", Static).update(f"👁️ {event.total_views:,}")
            self.query_one("#stat-likes", Static).update(f"❤️ {event.total_likes:,}")
            self.render_projects()
        elif isinstance(event, CreditsTotalUpdated):
            self.query_one("#stat-credits", Button).label = f"💎 {event.total:,}"
        elif isinstance(event, ProjectTipsUpdated):
            context = self.controller.context
            if context is not None and context.sort_state.by == SortBy.CREDITS:
                self.render_projects()
            else:
                table = self.query_one("#projects-table", DataTable)
                table.update_cell(event.project_id, "tips", f"💎 {event.tips:,}")

    def render_projects(self) -> None:
        """Rebuild the grid in the current sort order."""
        table = self.query_one("#projects-table", DataTable)
        table.clear()
        if self.controller.context is None:
            return
        seen: set[str] = set()
        for entry in self.controller.sorted_entries():
            project = entry.project
            if project.id in seen:
                logger.warning("Skipping duplicate project {}", project.id)
                continue
            seen.add(project.id)
            description = project.description or ""
            if len(description) > DESCRIPTION_WIDTH:
                description = description[: DESCRIPTION_WIDTH - 3] + "..."
            table.add_row(
                project.display_title,
                description,
                f"👁️ {project.stats.views:,}",
                f"❤️ {project.stats.likes:,}",
                f"💬 {project.stats.comments:,}",
                f"💎 {entry.tips_received:,}",
                project.url,
                key=project.id,
            )
        if not table.row_count and self.controller.context.projects_loaded:
            self.notify("No projects found", severity="warning")

    # Sorting

    @staticmethod
    def _order_label(order: SortOrder) -> str:
        return "▲ Asc" if order == SortOrder.ASC else "▼ Desc"

    @on(Select.Changed, "#select-sort")
    def on_sort_changed(self, event: Select.Changed) -> None:
        if event.value is Select.BLANK:
            return
        self.apply_sort_by(SortBy(event.value))

    def apply_sort_by(self, by: SortBy) -> None:
        """Reorder the grid, or keep the choice for when the profile resolves."""
        if self.controller.context is None:
            order = self._config.sort_state.order
            self._config.view_state = ViewState(sort_by=by.value, sort_order=order.value)
            return
        self.controller.set_sort_by(by)
        self.render_projects()

    @on(Button.Pressed, "#btn-sort-order")
    def on_sort_order_pressed(self) -> None:
        self.action_toggle_order()

    def action_toggle_order(self) -> None:
        if self.controller.context is None:
            sort = self._config.sort_state
            sort.toggle_order()
            self._config.view_state = ViewState(sort_by=sort.by.value, sort_order=sort.order.value)
        else:
            self.controller.toggle_sort_order()
            sort = self.controller.context.sort_state
            self.render_projects()
        self.query_one("#btn-sort-order", Button).label = self._order_label(sort.order)

    def action_cycle_sort(self) -> None:
        keys = [key.value for key, _ in SORT_OPTIONS]
        select = self.query_one("#select-sort", Select)
        current = select.value if select.value in keys else keys[0]
        select.value = keys[(keys.index(current) + 1) % len(keys)]

    # Relations

    def _install_relations_screen(self, kind: RelationKind, users: list[UserSummary]) -> str:
        name = f"relations-{kind.value}"
        self.install_screen(RelationsScreen(kind, users), name=name)
        return name

    @work(exclusive=True, group="relations")
    async def open_relations(self, kind: RelationKind) -> None:
        """Show the followers/following modal, fetching the list on first use."""
        if self.browser.is_open:
            return
        self.notify(f"Loading {kind.value}...", timeout=2)
        screen_name = await self.browser.open(kind)
        self.push_screen(screen_name, lambda _: self.browser.close())

    @on(Button.Pressed, "#stat-followers")
    def on_followers_pressed(self) -> None:
        self.action_show_followers()

    @on(Button.Pressed, "#stat-following")
    def on_following_pressed(self) -> None:
        self.action_show_following()

    def action_show_followers(self) -> None:
        self.open_relations(RelationKind.FOLLOWERS)

    def action_show_following(self) -> None:
        self.open_relations(RelationKind.FOLLOWING)

    # Tipping

    @on(Button.Pressed, "#stat-credits")
    def on_credits_pressed(self) -> None:
        self.action_tip()

    def action_tip(self) -> None:
        self.send_tip()

    @work(exclusive=True, group="tip")
    async def send_tip(self) -> None:
        if self.controller.context is None or not self.controller.context.projects_loaded:
            self.notify("Profile is still loading", severity="warning")
            return
        try:
            await self.controller.tip()
        except TipError as e:
            self.notify(str(e), severity="error", timeout=5)
            return
        self.notify(f"💎 Tipped {self._config.tip_credits:,} credits!")

    # Misc

    def action_open_project(self) -> None:
        table = self.query_one("#projects-table", DataTable)
        if not table.row_count:
            return
        url = table.get_row_at(table.cursor_row)[-1]
        import webbrowser
        webbrowser.open(url)
        self.notify(f"Opening {url[:50]}...")

    def _save_view_state(self) -> None:
        if self.controller.context is not None:
            self._config.save_view_state(self.controller.context.sort_state)

    def action_quit(self) -> None:
        self._save_view_state()
        self.exit()
