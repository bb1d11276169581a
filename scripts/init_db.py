from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.qr_attendance.qr_attendance.database.bootstrap import TREE_TABLE, apply_schema, count_tree_nodes, list_tables


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    if str(getattr(settings, "STORE_BACKEND", "mysql")).lower() != "mysql":
        print(f"SKIP: STORE_BACKEND={settings.STORE_BACKEND!r} keeps the tree in memory")
        return 0

    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    if TREE_TABLE not in list_tables(db_config):
        print(f"ERROR: schema.sql applied to {target} but table {TREE_TABLE!r} is missing", file=sys.stderr)
        return 1

    print(f"OK: {target} ready ({TREE_TABLE}: {count_tree_nodes(db_config)} leaves)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
