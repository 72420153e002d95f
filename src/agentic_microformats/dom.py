# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Host tree capability contract and the containment primitives built on it.

Leaf module with no agentic_microformats imports.  Any host (lxml, a browser
bridge, a custom tree) can be extracted from by implementing AgentElement.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol


class AgentElement(Protocol):
    """A node handle in the host tree.

    Two handles compare (and hash) equal iff they refer to the same node.
    Selectors are the simple language: tag, ``[attr]``, ``[attr="value"]``.
    """

    def get_attribute(self, name: str) -> str | None: ...

    def has_attribute(self, name: str) -> bool: ...

    def query_selector(self, selector: str) -> AgentElement | None: ...

    def query_selector_all(self, selector: str) -> list[AgentElement]:
        """Strict descendants matching *selector*, in document order."""
        ...

    def closest(self, selector: str) -> AgentElement | None:
        """Nearest node matching *selector*, starting at this node itself."""
        ...

    @property
    def text_content(self) -> str | None: ...

    @property
    def children(self) -> Sequence[AgentElement]: ...

    @property
    def tag_name(self) -> str: ...


class MutationSource(Protocol):
    """Host-owned change notification.  Each listener call is one round."""

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register *listener*; return a callable that unsubscribes it."""
        ...


def nearest(el: AgentElement, selector: str) -> AgentElement | None:
    """Nearest enclosing node (inclusive) carrying the marker in *selector*.

    Every ancestor-relative decision (trust level, ignore regions and
    property/action ownership) goes through this one lookup.
    """
    return el.closest(selector)


def is_owned_by(el: AgentElement, owner: AgentElement, selector: str) -> bool:
    """True if *owner* is the nearest *selector* node enclosing *el*."""
    return nearest(el, selector) == owner


class ContainmentIndex:
    """Resource hierarchy reconstructed from a flat, unordered node set.

    A node's parent is the nearest other node whose subtree contains it.
    Containers of one node form a chain, so the nearest is the one with
    the fewest marked descendants.  No document order is assumed.
    """

    def __init__(self, nodes: Iterable[AgentElement], selector: str) -> None:
        self._nodes: list[AgentElement] = list(nodes)
        self._descendants: dict[AgentElement, frozenset[AgentElement]] = {
            node: frozenset(node.query_selector_all(selector)) for node in self._nodes
        }
        self._parent: dict[AgentElement, AgentElement | None] = {
            node: self._nearest_container(node) for node in self._nodes
        }
        self._children: dict[AgentElement, list[AgentElement]] = {node: [] for node in self._nodes}
        for node in self._nodes:
            parent = self._parent[node]
            if parent is not None:
                self._children[parent].append(node)

    def _nearest_container(self, node: AgentElement) -> AgentElement | None:
        containers = [other for other in self._nodes if other != node and node in self._descendants[other]]
        if not containers:
            return None
        return min(containers, key=lambda c: len(self._descendants[c]))

    def __len__(self) -> int:
        return len(self._nodes)

    def parent_of(self, node: AgentElement) -> AgentElement | None:
        return self._parent.get(node)

    def children_of(self, node: AgentElement) -> list[AgentElement]:
        return list(self._children.get(node, ()))

    def top_level(self) -> list[AgentElement]:
        return [node for node in self._nodes if self._parent[node] is None]
