"""Click CLI for Showcase."""

import asyncio
from pathlib import Path
from typing import Optional

import click
from trogon import tui

from showcase import __version__
from showcase.config import (
    AVAILABLE_THEMES,
    LOG_LEVELS,
    SETTABLE_KEYS,
    ShowcaseConfig,
    is_log_level,
    setup_logging,
)
from showcase.errors import IdentityError, TipError
from showcase.models import RelationKind, SortBy, SortOrder, SortState
from showcase.profile import ProfileContext, ProfileController, StaticIdentityProvider
from showcase.profile_file import EXPORT_FORMATS, export_profile
from showcase.sorting import sort_projects
from showcase.sources import WebsimClient


SORT_BY_CHOICES = [s.value for s in SortBy]
ORDER_CHOICES = [o.value for o in SortOrder]


def _fmt(value: Optional[int]) -> str:
    return f"{value:,}" if value is not None else "N/A"


async def _load_profile(
    username: str,
    config: ShowcaseConfig,
    with_stats: bool = True,
    token: Optional[str] = None,
) -> ProfileContext:
    async with WebsimClient(config.base_url, token=token) as client:
        controller = ProfileController(client, StaticIdentityProvider(username), config)
        return await controller.load(with_stats=with_stats)


def _load_or_exit(username: str, config: ShowcaseConfig, with_stats: bool = True) -> ProfileContext:
    try:
        return asyncio.run(_load_profile(username, config, with_stats=with_stats))
    except IdentityError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@tui()
@click.group()
@click.version_option(version=__version__, prog_name="showcase")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default from config)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Showcase - creator profile viewer for Websim.

    Browse a creator's followers, following and projects with their
    views, likes, comments and tips.

    Quick start:
        showcase dashboard USER    Launch interactive TUI dashboard
        showcase tui               Launch command explorer (Trogon)
        showcase profile USER      Print a profile summary
        showcase followers USER    List followers
    """
    config = ShowcaseConfig.load()
    ctx.obj = config
    if ctx.invoked_subcommand != "dashboard":
        setup_logging(log_level or config.log_level)


@cli.command()
@click.argument("username")
@click.option("--token", "-t", envvar="WEBSIM_TOKEN", help="Websim API token (for tipping)")
@click.pass_obj
def dashboard(config: ShowcaseConfig, username: str, token: Optional[str]) -> None:
    """Launch the interactive TUI dashboard.

    USERNAME: Creator whose profile to show

    Keyboard shortcuts:
        f - Followers
        g - Following
        s - Cycle sort key
        o - Toggle sort order
        t - Tip credits
        q - Quit
    """
    from showcase.tui import ShowcaseApp

    setup_logging(config.log_level, log_file=ShowcaseConfig.get_log_path())
    app = ShowcaseApp(username, token=token, config=config)
    app.run()
    if app.return_code:
        raise SystemExit(app.return_code)


@cli.command()
@click.argument("username")
@click.option("--sort-by", "-s", type=click.Choice(SORT_BY_CHOICES), help="Sort key")
@click.option("--order", "-o", type=click.Choice(ORDER_CHOICES), help="Sort direction")
@click.option("--format", "-f", "fmt", type=click.Choice(("text",) + EXPORT_FORMATS), default="text")
@click.option("--no-stats", is_flag=True, help="Skip per-project tip stats")
@click.option("--limit", "-l", type=click.IntRange(min=0), default=0, help="Max projects to show (0 = all)")
@click.pass_obj
def profile(
    config: ShowcaseConfig,
    username: str,
    sort_by: Optional[str],
    order: Optional[str],
    fmt: str,
    no_stats: bool,
    limit: int,
) -> None:
    """Show a creator's profile summary and projects.

    USERNAME: Creator whose profile to show

    Examples:
        showcase profile someone
        showcase profile someone --sort-by credits --order desc
        showcase profile someone --format yaml
    """
    context = _load_or_exit(username, config, with_stats=not no_stats)
    context.sort_state = SortState(
        by=SortBy(sort_by) if sort_by else context.sort_state.by,
        order=SortOrder(order) if order else context.sort_state.order,
    )

    if fmt != "text":
        click.echo(export_profile(
            context,
            fmt=fmt,
            avatar_base_url=config.avatar_base_url,
            screenshot_base_url=config.screenshot_base_url,
        ))
        return

    identity = context.identity
    click.echo(f"\n👤 @{identity.username}")
    click.echo("=" * 50)
    click.echo(f"  Avatar: {identity.avatar_url(config.avatar_base_url)}")
    click.echo(
        f"  Followers: {_fmt(context.follower_count)} | "
        f"Following: {_fmt(context.following_count)}"
    )
    click.echo(
        f"  👁️ {context.total_views:,} views | ❤️ {context.total_likes:,} likes | "
        f"💎 {context.total_credits:,} credits"
    )

    if not context.entries:
        click.echo("\nNo projects found.")
        return

    entries = sort_projects(context.entries, context.sort_state)
    shown = entries[:limit] if limit else entries
    click.echo(
        f"\n📁 Projects (by {context.sort_state.by.value}, {context.sort_state.order.value}):"
    )
    click.echo("-" * 50)
    for entry in shown:
        project = entry.project
        click.echo(f"\n  {project.display_title}")
        if project.description:
            desc = project.description[:60] + "..." if len(project.description) > 60 else project.description
            click.echo(f"    {desc}")
        click.echo(
            f"    👁️ {project.stats.views:,}  ❤️ {project.stats.likes:,}  "
            f"💬 {project.stats.comments:,}  💎 {entry.tips_received:,}"
        )
        click.echo(f"    {project.url}")

    if len(shown) < len(entries):
        click.echo(f"\n  ... and {len(entries) - len(shown)} more")
    click.echo(f"\nTotal: {len(entries)} projects")


def _list_relations(config: ShowcaseConfig, username: str, kind: RelationKind) -> None:
    async def fetch():
        async with WebsimClient(config.base_url) as client:
            controller = ProfileController(client, StaticIdentityProvider(username), config)
            return await controller.relations(kind)

    try:
        users = asyncio.run(fetch())
    except IdentityError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not users:
        click.echo(f"No {kind.value} found.")
        return

    click.echo(f"\n👥 {kind.value.capitalize()} of @{username}:")
    click.echo("-" * 50)
    for user in users:
        badge = " [Admin]" if user.is_admin else ""
        click.echo(f"  @{user.username}{badge}")
        click.echo(f"    {user.profile_url}")
    click.echo(f"\nTotal: {len(users)}")


@cli.command()
@click.argument("username")
@click.pass_obj
def followers(config: ShowcaseConfig, username: str) -> None:
    """List a creator's followers.

    USERNAME: Creator whose followers to list
    """
    _list_relations(config, username, RelationKind.FOLLOWERS)


@cli.command()
@click.argument("username")
@click.pass_obj
def following(config: ShowcaseConfig, username: str) -> None:
    """List the users a creator follows.

    USERNAME: Creator whose followed users to list
    """
    _list_relations(config, username, RelationKind.FOLLOWING)


@cli.command()
@click.argument("username")
@click.option("--token", "-t", envvar="WEBSIM_TOKEN", help="Websim API token")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def tip(config: ShowcaseConfig, username: str, token: Optional[str], yes: bool) -> None:
    """Tip credits to a creator's profile.

    USERNAME: Creator to tip
    """
    if not token:
        click.echo("Error: a Websim token is required (--token or WEBSIM_TOKEN).", err=True)
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Tip {config.tip_credits:,} credits to @{username}?", abort=True)

    async def send() -> None:
        async with WebsimClient(config.base_url, token=token) as client:
            controller = ProfileController(client, StaticIdentityProvider(username), config)
            await controller.resolve()
            await controller.load_projects()
            await controller.tip()

    try:
        asyncio.run(send())
    except (IdentityError, TipError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"✓ Tipped {config.tip_credits:,} credits to @{username}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the Showcase JSON API server."""
    import uvicorn

    click.echo(f"Starting Showcase API server at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")
    uvicorn.run(
        "showcase.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


# =============================================================================
# Config Commands
# =============================================================================


@cli.group("config")
def config_group() -> None:
    """View and change persistent settings (~/.showcase/config.json)."""
    pass


@config_group.command("show")
@click.pass_obj
def config_show(config: ShowcaseConfig) -> None:
    """Show current settings."""
    click.echo(f"\n⚙️  Config: {ShowcaseConfig.get_config_path()}")
    click.echo("=" * 50)
    for key in SETTABLE_KEYS:
        click.echo(f"  {key}: {getattr(config, key)}")
    sort = config.sort_state
    click.echo(f"  sort: {sort.by.value} {sort.order.value}")


@config_group.command("set")
@click.argument("key", type=click.Choice(list(SETTABLE_KEYS)))
@click.argument("value")
@click.pass_obj
def config_set(config: ShowcaseConfig, key: str, value: str) -> None:
    """Set KEY to VALUE."""
    value_type = SETTABLE_KEYS[key]
    try:
        converted = value_type(value)
    except ValueError:
        click.echo(f"Error: {key} expects {value_type.__name__}, got '{value}'", err=True)
        raise SystemExit(1)

    themes = [theme for theme, _ in AVAILABLE_THEMES]
    if key == "theme" and converted not in themes:
        click.echo(f"Error: unknown theme '{value}' (choose from: {', '.join(themes)})", err=True)
        raise SystemExit(1)
    if key == "log_level":
        if not is_log_level(converted):
            click.echo(f"Error: unknown log level '{value}' (choose from: {', '.join(LOG_LEVELS)})", err=True)
            raise SystemExit(1)
        converted = converted.upper()

    setattr(config, key, converted)
    config.__post_init__()
    config.save()
    click.echo(f"✓ {key} = {getattr(config, key)}")


@config_group.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def config_reset(config: ShowcaseConfig, yes: bool) -> None:
    """Reset all settings to defaults."""
    if not yes:
        click.confirm("Reset all settings to defaults?", abort=True)
    config.reset()
    config.save()
    click.echo("✓ Settings reset")


# =============================================================================
# Export Commands
# =============================================================================


@cli.group("export")
def export_group() -> None:
    """Export profile data to files.

    Examples:
        showcase export profile someone
        showcase export profile someone -o someone.json --format json
    """
    pass


@export_group.command("profile")
@click.argument("username")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@click.option("--format", "-f", "fmt", type=click.Choice(EXPORT_FORMATS), default="yaml")
@click.option("--no-stats", is_flag=True, help="Skip per-project tip stats")
@click.pass_obj
def export_profile_cmd(
    config: ShowcaseConfig,
    username: str,
    output: Optional[str],
    fmt: str,
    no_stats: bool,
) -> None:
    """Export a creator's profile snapshot.

    USERNAME: Creator to export
    """
    context = _load_or_exit(username, config, with_stats=not no_stats)
    output_path = Path(output) if output else Path(f"{context.identity.username}.{fmt}")
    export_profile(
        context,
        output_path=output_path,
        fmt=fmt,
        avatar_base_url=config.avatar_base_url,
        screenshot_base_url=config.screenshot_base_url,
    )
    click.echo(click.style(f"✓ Exported {output_path}", fg="green"))
    click.echo(f"  Projects: {len(context.entries)}")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
