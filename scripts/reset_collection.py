#!/usr/bin/env python3
"""
Reset one visitor's gallery or shop in the configured storage backend.

Usage:
  python scripts/reset_collection.py --visitor <cookie value> --collection gallery|shop
  python scripts/reset_collection.py --list
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artsite.core.config import get_settings
from artsite.repositories.store import PersistentStore, build_backend
from artsite.services.site_service import Site


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a visitor's collection")
    ap.add_argument("--visitor", help="Visitor id (value of the 'visitor' cookie)")
    ap.add_argument("--collection", choices=["gallery", "shop"], help="Collection to empty")
    ap.add_argument("--list", action="store_true", help="List known visitor ids and exit")
    args = ap.parse_args()

    backend = build_backend(get_settings())
    if args.list:
        for namespace in backend.namespaces():
            print(namespace)
        return

    visitor = (args.visitor or "").strip()
    if not visitor or not args.collection:
        raise SystemExit("--visitor and --collection are required")
    if visitor not in backend.namespaces():
        raise SystemExit(f"Visitor '{visitor}' has no stored data")

    site = Site(PersistentStore(backend, visitor))
    editor = site.collection(args.collection)
    removed = len(editor)
    editor.reset()
    print(f"OK: {args.collection} reset for {visitor} ({removed} item(s) removed)")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
