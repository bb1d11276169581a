"""Hierarchical key/value store contract.

Values are JSON-like trees addressed by `/`-joined paths
(`users/{userId}/sessions/{sessionKey}`). Writing `None` deletes a subtree
and empty objects are never stored, so reading a missing path yields `None`.
"""
from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional, Protocol

from ..core.exceptions import ValidationError

_FORBIDDEN = set(".#$[]")


class TreeStore(Protocol):
    def read(self, path: str) -> Any:
        raise NotImplementedError

    def write(self, path: str, value: Any) -> None:
        raise NotImplementedError

    def batch_write(self, updates: Mapping[str, Any]) -> None:
        """Apply every update as one request, in mapping order.

        Implementations that can commit atomically must do so; the order is the
        recovery contract for those that cannot.
        """

        raise NotImplementedError


def split_path(path: str) -> list[str]:
    segments = [s for s in str(path).strip("/").split("/")]
    if not segments or any(not s for s in segments):
        raise ValidationError(f"Invalid store path: {path!r}")
    for s in segments:
        if any(ch in _FORBIDDEN for ch in s):
            raise ValidationError(f"Invalid store path segment {s!r} in {path!r}")
    return segments


def join_path(*segments: object) -> str:
    return "/".join(str(s) for s in segments)


def prune(value: Any) -> Any:
    """Drop None leaves and empty objects; lists become index-keyed objects."""
    if isinstance(value, (list, tuple)):
        value = {str(i): v for i, v in enumerate(value)}
    if isinstance(value, Mapping):
        out = {}
        for k, v in value.items():
            v = prune(v)
            if v is not None:
                out[str(k)] = v
        return out or None
    return value


def flatten(path: str, value: Any) -> Iterator[tuple[str, Any]]:
    """Yield (leaf_path, scalar) pairs for a pruned value."""
    if isinstance(value, Mapping):
        for k, v in value.items():
            yield from flatten(join_path(path, k), v)
    elif value is not None:
        yield path, value


def assemble(base: str, leaves: Mapping[str, Any]) -> Any:
    """Inverse of flatten for the leaves found at or below `base`."""
    if base in leaves:
        return leaves[base]

    root: dict = {}
    prefix = base + "/"
    for leaf_path, value in leaves.items():
        if not leaf_path.startswith(prefix):
            continue
        node = root
        parts = leaf_path[len(prefix):].split("/")
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return root or None
