"""Events published while a profile loads.

Presentation adapters register a listener and redraw only the fragment an
event touches.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from showcase.models import ProjectEntry, RelationKind


@dataclass(frozen=True)
class CountLoaded:
    """A followers/following count arrived. ``count`` is None when unavailable."""

    kind: RelationKind
    count: Optional[int]


@dataclass(frozen=True)
class ProjectsLoaded:
    """The project list is fetched; tips are still zero."""

    entries: list[ProjectEntry]
    total_views: int
    total_likes: int


@dataclass(frozen=True)
class CreditsTotalUpdated:
    total: int


@dataclass(frozen=True)
class ProjectTipsUpdated:
    project_id: str
    tips: int


ProfileEvent = Union[CountLoaded, ProjectsLoaded, CreditsTotalUpdated, ProjectTipsUpdated]
Listener = Callable[[ProfileEvent], None]


class EventEmitter:
    """Holds listeners and delivers events to them in registration order."""

    def __init__(self, listeners: Optional[list[Listener]] = None):
        self._listeners: list[Listener] = list(listeners or [])

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: ProfileEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
