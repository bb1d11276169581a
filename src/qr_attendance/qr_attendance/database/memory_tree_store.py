from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Mapping

from .tree_store import TreeStore, prune, split_path

logger = logging.getLogger(__name__)


class InMemoryTreeStore(TreeStore):
    """Process-local tree store.

    A batch is built on a copy of the tree and swapped in at the end, so it
    either applies completely or not at all.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._lock = threading.Lock()
        self._root: dict = prune(dict(initial or {})) or {}

    def read(self, path: str) -> Any:
        segments = split_path(path)
        with self._lock:
            node: Any = self._root
            for s in segments:
                if not isinstance(node, dict) or s not in node:
                    return None
                node = node[s]
            return copy.deepcopy(node)

    def write(self, path: str, value: Any) -> None:
        self.batch_write({path: value})

    def batch_write(self, updates: Mapping[str, Any]) -> None:
        with self._lock:
            root = copy.deepcopy(self._root)
            for path, value in updates.items():
                self._apply(root, split_path(path), prune(copy.deepcopy(value)))
            self._root = root
        logger.debug("applied %d store updates", len(updates))

    def snapshot(self) -> dict:
        with self._lock:
            return copy.deepcopy(self._root)

    @staticmethod
    def _apply(root: dict, segments: list[str], value: Any) -> None:
        trail = [root]
        node = root
        for s in segments[:-1]:
            child = node.get(s)
            if not isinstance(child, dict):
                if value is None:
                    return
                child = {}
                node[s] = child
            node = child
            trail.append(node)

        if value is None:
            node.pop(segments[-1], None)
        else:
            node[segments[-1]] = value

        # Empty parents disappear, like the hosted tree stores do.
        for depth in range(len(trail) - 1, 0, -1):
            if trail[depth]:
                break
            trail[depth - 1].pop(segments[depth - 1], None)
