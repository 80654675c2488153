"""Scene graph contract and the leaf walker."""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


class SceneGraph(abc.ABC):
    """Hierarchical structure of a loaded model.

    Hosts implement :meth:`root` and :meth:`children`; :meth:`walk` may be
    overridden when the host has a faster native enumeration.
    """

    @abc.abstractmethod
    def root(self) -> int:
        """Return the id of the root node."""

    @abc.abstractmethod
    def children(self, node_id: int) -> list[int]:
        """Return the direct children of *node_id* (empty for a leaf)."""

    def walk(self, root: int | None = None) -> list[int]:
        """Return every leaf below *root* (the graph root by default)."""
        return walk(self, self.root() if root is None else root)


def walk(graph: SceneGraph, root: int) -> list[int]:
    """Depth-first list of the leaves reachable from *root*.

    Children are visited in the order the graph reports them, so the result
    is deterministic for a fixed graph.  A root without children yields an
    empty list.
    """
    leaves: list[int] = []
    stack = list(reversed(graph.children(root)))
    seen: set[int] = {root}

    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        kids = graph.children(node)
        if kids:
            stack.extend(reversed(kids))
        else:
            leaves.append(node)

    logger.debug("Walked %d leaves under node %s", len(leaves), root)
    return leaves


class InMemorySceneGraph(SceneGraph):
    """Scene graph backed by a ``parent -> children`` mapping."""

    def __init__(self, root_id: int, tree: Mapping[int, Iterable[int]]) -> None:
        self._root = root_id
        self._tree = {parent: list(kids) for parent, kids in tree.items()}

    def root(self) -> int:
        return self._root

    def children(self, node_id: int) -> list[int]:
        return list(self._tree.get(node_id, []))

    @classmethod
    def flat(cls, leaf_ids: Iterable[int], root_id: int = 0) -> InMemorySceneGraph:
        """A one-level graph whose root directly holds *leaf_ids*."""
        return cls(root_id, {root_id: list(leaf_ids)})
