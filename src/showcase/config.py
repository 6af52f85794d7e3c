"""Showcase configuration management.

Handles persistent settings stored in ~/.showcase/config.json
"""

import json
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from loguru import logger

from showcase.models import SortBy, SortOrder, SortState


# Default configuration values
DEFAULT_BASE_URL = "https://websim.com"
DEFAULT_AVATAR_BASE_URL = "https://images.websim.com/avatar"
DEFAULT_SCREENSHOT_BASE_URL = "https://images.websim.com/v1/site"
MAX_PAGE_SIZE = 100  # Largest page the API honors
DEFAULT_TIP_MESSAGE = "Tipping 1000 credits to this amazing profile!"
DEFAULT_TIP_CREDITS = 1000
DEFAULT_THEME = "textual-dark"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ViewState:
    """Persistent view state for the TUI dashboard."""

    sort_by: str = SortBy.LAST_UPDATED.value
    sort_order: str = SortOrder.DESC.value

    def to_sort_state(self) -> SortState:
        """Build a SortState, falling back to defaults for unknown values."""
        try:
            return SortState(by=SortBy(self.sort_by), order=SortOrder(self.sort_order))
        except ValueError:
            return SortState()


@dataclass
class ShowcaseConfig:
    """Showcase application configuration."""

    # API endpoints
    base_url: str = DEFAULT_BASE_URL
    avatar_base_url: str = DEFAULT_AVATAR_BASE_URL
    screenshot_base_url: str = DEFAULT_SCREENSHOT_BASE_URL

    # Fetch behaviour
    page_size: int = MAX_PAGE_SIZE
    stats_concurrency: Optional[int] = None  # None = one request per project at once

    # Tipping
    tip_message: str = DEFAULT_TIP_MESSAGE
    tip_credits: int = DEFAULT_TIP_CREDITS

    # Appearance / diagnostics
    theme: str = DEFAULT_THEME
    log_level: str = DEFAULT_LOG_LEVEL

    # View state - stores last dashboard sort for restoration
    view_state: Optional[ViewState] = None

    def __post_init__(self) -> None:
        self.page_size = max(1, min(self.page_size, MAX_PAGE_SIZE))
        if self.stats_concurrency is not None and self.stats_concurrency < 1:
            self.stats_concurrency = None

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the config file."""
        return Path.home() / ".showcase" / "config.json"

    @classmethod
    def get_log_path(cls) -> Path:
        """Get the path to the dashboard log file."""
        return cls.get_config_path().parent / "showcase.log"

    @classmethod
    def load(cls) -> "ShowcaseConfig":
        """Load configuration from file, or return defaults if not found."""
        config_path = cls.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                # Only use known fields to avoid issues with old config versions
                known_fields = {f.name for f in cls.__dataclass_fields__.values()}
                filtered_data = {k: v for k, v in data.items() if k in known_fields}

                if "view_state" in filtered_data and filtered_data["view_state"] is not None:
                    view_state_data = filtered_data["view_state"]
                    if isinstance(view_state_data, dict):
                        view_state_fields = {f.name for f in ViewState.__dataclass_fields__.values()}
                        filtered_data["view_state"] = ViewState(
                            **{k: v for k, v in view_state_data.items() if k in view_state_fields}
                        )
                    else:
                        filtered_data["view_state"] = None

                return cls(**filtered_data)
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                logger.warning("Ignoring invalid config file {}: {}", config_path, e)

        return cls()

    def save(self) -> None:
        """Save configuration to file."""
        config_path = self.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    def reset(self) -> None:
        """Reset configuration to defaults."""
        defaults = ShowcaseConfig()
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(defaults, name))

    @property
    def sort_state(self) -> SortState:
        """Sort restored from the saved view state."""
        if self.view_state is None:
            return SortState()
        return self.view_state.to_sort_state()

    def save_view_state(self, sort_state: SortState) -> None:
        """Save the current sort for restoration on next launch."""
        self.view_state = ViewState(
            sort_by=sort_state.by.value,
            sort_order=sort_state.order.value,
        )
        self.save()


def is_log_level(level: str) -> bool:
    """Check whether loguru knows ``level``."""
    try:
        logger.level(level.upper())
    except ValueError:
        return False
    return True


def setup_logging(level: str = DEFAULT_LOG_LEVEL, log_file: Optional[Path] = None) -> None:
    """Route loguru output to stderr, or to a file when the terminal is in use.

    An unknown level falls back to DEFAULT_LOG_LEVEL with a warning.
    """
    unknown = not is_log_level(level)
    if unknown:
        bad_level, level = level, DEFAULT_LOG_LEVEL
    logger.remove()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level.upper(), rotation="1 MB", retention=3)
    else:
        # Resolve sys.stderr per message so swapped streams are honored
        logger.add(lambda message: sys.stderr.write(message), level=level.upper())
    if unknown:
        logger.warning("Unknown log level {!r}, using {}", bad_level, DEFAULT_LOG_LEVEL)


# Settable keys for `showcase config set`, with their value types
SETTABLE_KEYS: dict[str, type] = {
    "base_url": str,
    "avatar_base_url": str,
    "screenshot_base_url": str,
    "page_size": int,
    "stats_concurrency": int,
    "tip_message": str,
    "tip_credits": int,
    "theme": str,
    "log_level": str,
}

AVAILABLE_THEMES = [
    ("textual-dark", "Textual Dark"),
    ("textual-light", "Textual Light"),
    ("nord", "Nord"),
    ("gruvbox", "Gruvbox"),
    ("dracula", "Dracula"),
    ("tokyo-night", "Tokyo Night"),
    ("monokai", "Monokai"),
]

SORT_OPTIONS = [
    (SortBy.LAST_UPDATED, "Last Updated"),
    (SortBy.LAST_PUBLISHED, "Last Published"),
    (SortBy.VIEW_COUNT, "Views"),
    (SortBy.LIKES, "Likes"),
    (SortBy.COMMENTS, "Comments"),
    (SortBy.CREDITS, "Credits"),
]
