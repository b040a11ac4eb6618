#!/usr/bin/env python3
"""
Load every rules/*.yaml file into the database.
Idempotent: safe to run multiple times (upserts).

Usage (from project root):
  python scripts/seed_rules.py [rules_dir]
"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def main() -> int:
    from backend.database import Base, SessionLocal, engine
    from backend.models_db import RuleDocumentModel  # noqa: F401
    from backend.services.rules_service import RULES_DIR, import_rules_dir

    rules_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else RULES_DIR
    if not rules_dir.is_dir():
        print(f"Rules directory not found: {rules_dir}", file=sys.stderr)
        return 1
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        names = import_rules_dir(db, rules_dir)
        for name in names:
            print(f"Seeded rule: {name}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
