"""Host tree interface consumed by the relocation core.

The core never touches Qt types directly; callers inject an adapter that
implements :class:`HostAdapter` (see ``qt_host.QtHostAdapter``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

_LOGGER = logging.getLogger("TitleTool")

Node = Any
GridSlot = Tuple[int, int]


class HostEvent(Enum):
    LOADED = "loaded"
    LAYOUT_UPDATED = "layout_updated"
    VISIBILITY_CHANGED = "visibility_changed"


@dataclass(frozen=True)
class Margins:
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    def with_top(self, value: int) -> "Margins":
        return replace(self, top=int(value))

    def with_left(self, value: int) -> "Margins":
        return replace(self, left=int(value))


class Subscription:
    """Handle for a single host event registration."""

    def __init__(self, dispose_fn: Callable[[], None], *, label: str = "") -> None:
        self._dispose_fn: Optional[Callable[[], None]] = dispose_fn
        self.label = label

    @property
    def active(self) -> bool:
        return self._dispose_fn is not None

    def dispose(self) -> None:
        dispose_fn = self._dispose_fn
        if dispose_fn is None:
            return
        self._dispose_fn = None
        try:
            dispose_fn()
        except Exception:
            _LOGGER.debug("Failed to dispose subscription %s", self.label or self, exc_info=True)

    def __repr__(self) -> str:
        state = "active" if self.active else "disposed"
        return f"Subscription({self.label!r}, {state})"


class SubscriptionSet:
    """Owns a group of subscriptions so they can be torn down together."""

    def __init__(self) -> None:
        self._handles: List[Subscription] = []

    def add(self, handle: Subscription) -> Subscription:
        self._handles.append(handle)
        return handle

    def extend(self, handles: Iterable[Subscription]) -> None:
        for handle in handles:
            self.add(handle)

    @property
    def handles(self) -> List[Subscription]:
        return [handle for handle in self._handles if handle.active]

    def __len__(self) -> int:
        return len(self.handles)

    def dispose_all(self) -> int:
        handles, self._handles = self._handles, []
        disposed = 0
        for handle in handles:
            if handle.active:
                handle.dispose()
                disposed += 1
        return disposed


class HostAdapter(Protocol):
    """Operations the relocation core needs from the host widget tree."""

    def children(self, node: Node) -> Sequence[Node]: ...

    def type_name(self, node: Node) -> str: ...

    def name(self, node: Node) -> Optional[str]: ...

    def is_visible(self, node: Node) -> bool: ...

    def is_loaded(self, node: Node) -> bool: ...

    def width(self, node: Node) -> float: ...

    def parent(self, node: Node) -> Optional[Node]: ...

    def create_wrapper(self, source: Node) -> Node: ...

    def detach(self, node: Node, container: Node) -> None: ...

    def attach(self, node: Node, container: Node, slot: Optional[GridSlot] = None) -> None: ...

    def set_margins(self, node: Node, margins: Margins) -> None: ...

    def set_visible(self, node: Node, visible: bool) -> None: ...

    def apply_control_fixups(self, control: Node) -> None: ...

    def subscribe(self, node: Node, event: HostEvent, callback: Callable[[], None]) -> Subscription: ...


def child_at_path(host: HostAdapter, node: Node, path: Sequence[int]) -> Optional[Node]:
    """Walk ``path`` (child indices) down from ``node``; ``None`` when any step is missing."""
    current = node
    for index in path:
        children = host.children(current)
        if index < 0 or index >= len(children):
            return None
        current = children[index]
    return current
