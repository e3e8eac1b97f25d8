from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from pewcraft_client.api.client import RemoteSessionClient
from pewcraft_client.api.models import GameDefinition

if TYPE_CHECKING:
    from pewcraft_client.core.events import Event

P = TypeVar("P")
C = TypeVar("C")
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RootContext:
    """Bottom of every context chain: the catalog and the backend handle."""

    catalog: GameDefinition
    client: RemoteSessionClient
    team_size: int = 2
    # Replaces the default PlayGame behaviour; see `pewcraft_client.core.play`.
    play_step: Callable[[Any, "Event"], Any] | None = None


@dataclass(frozen=True, slots=True)
class StateData(Generic[P, C]):
    """One link of the context chain.

    `prev` is the full data of the state this one was built from (another
    `StateData`, or the `RootContext`), `curr` holds what the current step owns.
    Both are immutable; updating a step produces a new link with the same `prev`.
    """

    prev: P
    curr: C

    def with_curr(self, curr: C) -> "StateData[P, C]":
        return StateData(prev=self.prev, curr=curr)

    def update(self, **changes: Any) -> "StateData[P, C]":
        return self.with_curr(replace(self.curr, **changes))  # type: ignore[type-var]

    @property
    def root(self) -> RootContext:
        node: Any = self.prev
        while isinstance(node, StateData):
            node = node.prev
        if not isinstance(node, RootContext):
            raise TypeError(f"Context chain does not end at a RootContext: {node!r}")
        return node

    def ancestor(self, kind: type[T]) -> T:
        """Return the nearest ancestor step data of the given type."""

        node: Any = self.prev
        while isinstance(node, StateData):
            if isinstance(node.curr, kind):
                return node.curr
            node = node.prev
        raise LookupError(f"No {kind.__name__} in the context chain")

    def depth(self) -> int:
        n = 1
        node: Any = self.prev
        while isinstance(node, StateData):
            n += 1
            node = node.prev
        return n
