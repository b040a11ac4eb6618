"""Health and metrics endpoints."""

from pathlib import Path

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.services.monitoring_service import get_health, get_metrics
from backend.services.rules_service import get_rules_dir

router = APIRouter(tags=["monitoring"])


@router.get("/health", summary="Health check")
def health(rules_dir: Path = Depends(get_rules_dir)):
    """Health check for load balancers. Returns database and rules directory status."""
    return get_health(rules_dir)


@router.get("/metrics", summary="Rule metrics")
def metrics(db: Session = Depends(get_db), rules_dir: Path = Depends(get_rules_dir)):
    """Number of rules in the database and in the rules directory."""
    return get_metrics(db, rules_dir)
