"""Profile export format - snapshot of a loaded creator profile.

Format:
```yaml
showcase:
  version: "1.0"
  generated_at: "2026-10-19T10:30:00+00:00"

profile:
  username: "someone"
  avatar_url: "https://images.websim.com/avatar/someone"
  followers: 120
  following: 37

totals:
  views: 10500
  likes: 830
  credits: 4000

sort:
  by: "last_updated"
  order: "desc"

projects:
  - id: "abc123"
    title: "My Game"
    url: "https://websim.com/p/abc123"
    views: 900
    likes: 40
    comments: 3
    tips: 1000
```
"""

import json
from pathlib import Path
from typing import Optional

import yaml

from showcase.config import DEFAULT_AVATAR_BASE_URL, DEFAULT_SCREENSHOT_BASE_URL
from showcase.models import ProjectEntry, utcnow
from showcase.profile import ProfileContext
from showcase.sorting import sort_projects


PROFILE_FILE_VERSION = "1.0"
EXPORT_FORMATS = ("yaml", "json")


def _project_record(entry: ProjectEntry, screenshot_base_url: str) -> dict:
    project = entry.project
    revision = entry.project_revision
    return {
        "id": project.id,
        "title": project.display_title,
        "description": project.description,
        "url": project.url,
        "thumbnail": revision.thumbnail_url(screenshot_base_url),
        "updated_at": project.updated_at.isoformat() if project.updated_at else None,
        "published_at": revision.created_at.isoformat() if revision.created_at else None,
        "views": project.stats.views,
        "likes": project.stats.likes,
        "comments": project.stats.comments,
        "tips": entry.tips_received,
    }


def generate_profile_document(
    context: ProfileContext,
    avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
    screenshot_base_url: str = DEFAULT_SCREENSHOT_BASE_URL,
) -> dict:
    """Generate an export dictionary for a loaded profile.

    Projects are listed in the context's current sort order.
    """
    entries = sort_projects(context.entries, context.sort_state)
    return {
        "showcase": {
            "version": PROFILE_FILE_VERSION,
            "generated_at": utcnow().isoformat(),
        },
        "profile": {
            "username": context.identity.username,
            "avatar_url": context.identity.avatar_url(avatar_base_url),
            "followers": context.follower_count,
            "following": context.following_count,
        },
        "totals": {
            "views": context.total_views,
            "likes": context.total_likes,
            "credits": context.total_credits,
        },
        "sort": {
            "by": context.sort_state.by.value,
            "order": context.sort_state.order.value,
        },
        "projects": [_project_record(entry, screenshot_base_url) for entry in entries],
    }


def dump_profile_document(document: dict, fmt: str = "yaml") -> str:
    """Serialize an export dictionary as YAML or JSON."""
    if fmt == "json":
        return json.dumps(document, indent=2, ensure_ascii=False)
    if fmt != "yaml":
        raise ValueError(f"Unknown export format: {fmt}")
    return yaml.safe_dump(
        document,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=100,
    )


def export_profile(
    context: ProfileContext,
    output_path: Optional[Path] = None,
    fmt: str = "yaml",
    **kwargs,
) -> str:
    """Export a loaded profile, optionally writing it to ``output_path``."""
    content = dump_profile_document(generate_profile_document(context, **kwargs), fmt)
    if output_path:
        output_path.write_text(content, encoding="utf-8")
    return content


def parse_profile_file(path: Path) -> dict:
    """Parse an exported profile file (YAML is a superset of JSON)."""
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def validate_profile_document(document: dict) -> tuple[bool, list[str]]:
    """Validate an export dictionary.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    if "showcase" not in document:
        errors.append("Missing required 'showcase' section")
    elif "version" not in document["showcase"]:
        errors.append("Missing showcase version")

    if "profile" not in document:
        errors.append("Missing required 'profile' section")
    elif "username" not in document["profile"]:
        errors.append("Missing profile username")

    if not isinstance(document.get("projects", []), list):
        errors.append("'projects' must be a list")

    return len(errors) == 0, errors
