"""Followers/following browser state, independent of the UI toolkit."""

from typing import Awaitable, Callable, Generic, Optional, TypeVar

from showcase.models import RelationKind, UserSummary


V = TypeVar("V")

# Builds the view for a kind from its user list; called once per kind
ViewFactory = Callable[[RelationKind, list[UserSummary]], V]
UserSource = Callable[[RelationKind], Awaitable[list[UserSummary]]]


class RelationBrowser(Generic[V]):
    """Two-state machine: closed, or open on one relation kind.

    Opening fetches (or reuses cached) users and builds the kind's view the
    first time; later opens of the same kind reuse that view. While open,
    background scrolling is locked.
    """

    def __init__(self, users: UserSource, view_factory: ViewFactory):
        self._users = users
        self._view_factory = view_factory
        self._views: dict[RelationKind, V] = {}
        self.open_kind: Optional[RelationKind] = None

    @property
    def is_open(self) -> bool:
        return self.open_kind is not None

    @property
    def scroll_locked(self) -> bool:
        return self.is_open

    def view(self, kind: RelationKind) -> Optional[V]:
        """The already-built view for ``kind``, if any."""
        return self._views.get(kind)

    async def open(self, kind: RelationKind) -> V:
        """Show the view for ``kind``, building it on first use."""
        users = await self._users(kind)
        view = self._views.get(kind)
        if view is None:
            view = self._view_factory(kind, users)
            self._views[kind] = view
        self.open_kind = kind
        return view

    def close(self) -> None:
        self.open_kind = None
