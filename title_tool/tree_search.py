"""Depth-first structural search over the host widget tree."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from title_tool.errors import InvalidArgument, InvalidQuery
from title_tool.host import HostAdapter, Node


@dataclass(frozen=True)
class SearchQuery:
    """Match on type identifier and/or name; when both are given both must match."""

    type_name: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type_name is None and self.name is None:
            raise InvalidQuery("need at least one type or name to search on")

    @classmethod
    def by_type(cls, type_name: str) -> "SearchQuery":
        return cls(type_name=type_name)

    @classmethod
    def by_name(cls, name: str) -> "SearchQuery":
        return cls(name=name)

    def matches(self, host: HostAdapter, node: Node) -> bool:
        if self.type_name is not None:
            if host.type_name(node).casefold() != self.type_name.casefold():
                return False
        if self.name is not None:
            node_name = host.name(node)
            if node_name is None or node_name.casefold() != self.name.casefold():
                return False
        return True


def search(host: HostAdapter, root: Node, query: SearchQuery) -> Iterator[Node]:
    """Yield every descendant of ``root`` matching ``query`` in pre-order.

    Descendants of a node are visited whether or not the node matched. The
    root itself is not tested. The returned iterator is lazy and walks the
    tree as it is at iteration time; issue a new search after mutations.
    """
    if root is None:
        raise InvalidArgument("search root is required")
    if query is None or (query.type_name is None and query.name is None):
        raise InvalidQuery("need at least one type or name to search on")
    return _walk(host, root, query)


def _walk(host: HostAdapter, root: Node, query: SearchQuery) -> Iterator[Node]:
    # Children are pushed in reverse so they pop in document order.
    stack: List[Node] = list(reversed(host.children(root)))
    while stack:
        node = stack.pop()
        if query.matches(host, node):
            yield node
        children = host.children(node)
        if children:
            stack.extend(reversed(children))


def first_match(host: HostAdapter, root: Node, query: SearchQuery) -> Optional[Node]:
    return next(search(host, root, query), None)
