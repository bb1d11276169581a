from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .connection import DatabaseConnection
from .mysql_base import fetchall, store_cursor
from .tree_store import TreeStore, assemble, flatten, join_path, prune, split_path

logger = logging.getLogger(__name__)


def _like_prefix(path: str) -> str:
    escaped = path.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped + "/%"


def _ancestors(path: str) -> list[str]:
    segments = path.split("/")
    return [join_path(*segments[:i]) for i in range(1, len(segments))]


def _decode(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    return json.loads(raw)


class MySQLTreeStore(TreeStore):
    """Tree store over a single `tree_nodes(path, value)` table of leaves.

    One `batch_write` is one transaction, so multi-path updates commit or roll
    back together.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def read(self, path: str) -> Any:
        path = "/".join(split_path(path))
        with store_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT path, value
                FROM tree_nodes
                WHERE path=%s OR path LIKE %s
                """,
                (path, _like_prefix(path)),
            )
            rows = fetchall(cur)
        return assemble(path, {r["path"]: _decode(r["value"]) for r in rows})

    def write(self, path: str, value: Any) -> None:
        self.batch_write({path: value})

    def batch_write(self, updates: Mapping[str, Any]) -> None:
        with store_cursor(self._conn_factory) as (_, cur):
            for raw_path, value in updates.items():
                path = "/".join(split_path(raw_path))
                self._replace(cur, path, prune(value))
        logger.debug("committed %d store updates", len(updates))

    @staticmethod
    def _replace(cur, path: str, value: Any) -> None:
        cur.execute(
            "DELETE FROM tree_nodes WHERE path=%s OR path LIKE %s",
            (path, _like_prefix(path)),
        )
        if value is None:
            return

        ancestors = _ancestors(path)
        if ancestors:
            placeholders = ",".join(["%s"] * len(ancestors))
            cur.execute(f"DELETE FROM tree_nodes WHERE path IN ({placeholders})", tuple(ancestors))

        rows = [(leaf, json.dumps(v)) for leaf, v in flatten(path, value)]
        cur.executemany(
            """
            INSERT INTO tree_nodes(path, value)
            VALUES(%s, %s)
            ON DUPLICATE KEY UPDATE value=VALUES(value)
            """,
            rows,
        )
