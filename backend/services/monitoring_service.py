"""
Health and metrics for RuleChart.

- Health check: DB connectivity, rules directory presence
- Metrics: stored rule counts
- Used by /api/health and /api/metrics
"""

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from backend.database import engine
from backend.models_db import RuleDocumentModel
from backend.services.rules_service import RULE_SUFFIX

logger = logging.getLogger(__name__)


def check_db() -> tuple[bool, str]:
    """Check database connectivity. Returns (ok, message)."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, "ok"
    except Exception as e:
        return False, str(e)


def get_health(rules_dir: Path) -> dict[str, Any]:
    """Return health status for /api/health."""
    db_ok, db_msg = check_db()
    rules_dir_ok = rules_dir.is_dir()
    return {
        "status": "healthy" if db_ok else "unhealthy",
        "checks": {
            "database": {"status": "up" if db_ok else "down", "message": db_msg},
            "rules_dir": {
                "status": "present" if rules_dir_ok else "missing",
                "message": str(rules_dir),
            },
        },
    }


def get_metrics(db: Session, rules_dir: Path) -> dict[str, Any]:
    """Counts of stored rules for /api/metrics."""
    rules_stored = db.query(func.count(RuleDocumentModel.name)).scalar() or 0
    rule_files = len(list(rules_dir.glob(f"*{RULE_SUFFIX}"))) if rules_dir.is_dir() else 0
    return {"rules_stored": rules_stored, "rule_files": rule_files}
