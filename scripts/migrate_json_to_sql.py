"""One-off migration script: JSON storage file -> SQL storage_entries."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Keep the artsite package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artsite.core.config import get_settings
from artsite.db.create_tables import create_all
from artsite.repositories.json_storage import JsonFileStorage
from artsite.repositories.sql_storage import SQLStorage


def migrate(data_file: Path) -> int:
    if not data_file.exists():
        raise SystemExit(f"File not found: {data_file}")
    source = JsonFileStorage(data_file)
    # No quota on the target: the data already fit in the source.
    target = SQLStorage(quota_bytes=0)
    create_all()
    copied = 0
    for namespace in source.namespaces():
        for key in source.keys(namespace):
            value = source.get_item(namespace, key)
            if value is None:
                continue
            target.set_item(namespace, key, value)
            copied += 1
    return copied


def main() -> None:
    ap = argparse.ArgumentParser(description="Copy JSON storage into the SQL backend")
    ap.add_argument("--data-file", help="JSON storage file (default: DATA_FILE setting)")
    args = ap.parse_args()
    data_file = Path(args.data_file or get_settings().data_file)
    copied = migrate(data_file)
    print(f"Copied {copied} entries from {data_file} to SQL storage.")


if __name__ == "__main__":
    main()
