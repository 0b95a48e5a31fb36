#!/usr/bin/env python3
"""Upsert the built-in topic catalog into the database."""
import sys

from learnmap.database import SessionLocal
from learnmap.services.topics.seed import seed_topics


def main() -> int:
    db = SessionLocal()
    try:
        created = seed_topics(db)
    finally:
        db.close()
    print(f"Seeded topics ({created} new).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
