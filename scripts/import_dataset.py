#!/usr/bin/env python3
"""
Import canned responses into the dataset.
Usage: python scripts/import_dataset.py <file.csv|file.json>

CSV lines are `category,key,response`; JSON is {category: {key: response}}.
Existing (category, key) pairs are skipped and counted as errors.
"""

import sys
from pathlib import Path

from app.database import SessionLocal, init_db
from app.logging_config import setup_logging
from app.services.dataset_import import load_dataset_file
from app.services.dataset_service import bulk_import, get_stats


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/import_dataset.py <file.csv|file.json>")
        sys.exit(1)

    path = Path(sys.argv[1])
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        sys.exit(1)

    setup_logging("WARNING")
    responses = load_dataset_file(path)
    total = sum(len(items) for items in responses.values() if isinstance(items, dict))
    print(f"Importing {total} responses from {path.name}...")

    init_db()
    db = SessionLocal()
    try:
        summary = bulk_import(db, responses, created_by="import_script")
        stats = get_stats(db)
    finally:
        db.close()

    print(f"Imported: {summary['success_count']}")
    print(f"Skipped/failed: {summary['error_count']}")
    for error in summary["errors"]:
        print(f"  {error}")
    print(f"Total active responses: {stats['total_responses']} in {stats['total_categories']} categories")


if __name__ == "__main__":
    main()
