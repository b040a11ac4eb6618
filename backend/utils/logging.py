"""
Structured logging for RuleChart.

- Configurable level (DEBUG, INFO, WARN, ERROR)
- Writes to /logs/ directory
- Console handler for development
- Helper for per-translation logging
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

# Default: project root / logs
LOG_DIR = Path(__file__).resolve().parent.parent.parent / "logs"
LOG_LEVEL = os.getenv("RULECHART_LOG_LEVEL", "INFO").upper()


def configure_logging(
    level: str = LOG_LEVEL,
    log_dir: Optional[Path] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
) -> None:
    """Configure root and backend loggers. Call once at app startup."""
    level_value = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level_value)
    # Avoid duplicate handlers when reloading
    for h in list(root.handlers):
        root.removeHandler(h)
    if log_to_file:
        log_dir = log_dir or LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "rulechart.log", encoding="utf-8")
        file_handler.setLevel(level_value)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        root.addHandler(file_handler)
    if log_to_console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level_value)
        console.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        root.addHandler(console)

    logging.getLogger("backend").setLevel(level_value)


def log_translation(
    logger: logging.Logger,
    source: str,
    conditions: int = 0,
    nodes: int = 0,
    edges: int = 0,
    warnings: int = 0,
    duration_sec: Optional[float] = None,
    success: bool = True,
    error: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Log one rule document translation (source is a rule name, file path or 'inline')."""
    payload = {
        "event": "translation",
        "source": source,
        "conditions": conditions,
        "nodes": nodes,
        "edges": edges,
        "warnings": warnings,
        "duration_sec": round(duration_sec, 6) if duration_sec is not None else None,
        "success": success,
        "error": error,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
    if extra:
        payload.update(extra)
    if success:
        logger.info("Translation: %s", json.dumps(payload, default=str))
    else:
        logger.warning("Translation: %s", json.dumps(payload, default=str))
