#!/usr/bin/env python3
"""
Seed per-date availability overrides.

Usage:
    python scripts/seed_availability.py                      # built-in seed
    python scripts/seed_availability.py 2025-12-24 10:00 11:00
"""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from meetbook.core.db import SessionLocal
from meetbook.services.availability import upsert_override

DEFAULT_SEED = [
    {"date": "2025-12-16", "slots": ["16:00", "17:00"]},
]


def seed(entries):
    db = SessionLocal()
    try:
        stored = []
        for entry in entries:
            override = upsert_override(db, entry["date"], entry["slots"])
            stored.append(override.to_dict())
        return stored
    finally:
        db.close()


def main(argv):
    entries = DEFAULT_SEED
    if argv:
        entries = [{"date": argv[0], "slots": argv[1:]}]
    try:
        for item in seed(entries):
            print(f"Seeded {item['date']}: {', '.join(item['slots'])}")
    except Exception as e:
        print(f"Error seeding availability: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
