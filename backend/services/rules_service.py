"""
Rule document storage: named YAML documents in the database, with the rules
directory as a read-only fallback (and seed source).
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from backend.models_db import RuleDocumentModel
from backend.translator import MalformedDocumentError, TranslationResult, parse_rule_document, translate

logger = logging.getLogger(__name__)

RULES_DIR = Path(os.getenv("RULECHART_RULES_DIR", str(Path(__file__).resolve().parent.parent.parent / "rules")))
RULE_SUFFIX = ".yaml"
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class InvalidRuleNameError(ValueError):
    """Rule name would escape the rules directory or is empty."""


def validate_rule_name(name: str) -> str:
    if not name or not _NAME_RE.match(name) or name.startswith("."):
        raise InvalidRuleNameError(f"Invalid rule name '{name}'")
    return name


def _rule_file(rules_dir: Path, name: str) -> Path:
    return rules_dir / f"{validate_rule_name(name)}{RULE_SUFFIX}"


def list_rule_names(db: Session, rules_dir: Optional[Path] = None) -> list[str]:
    """Names of all stored rules (database and rules directory), sorted."""
    rules_dir = rules_dir or RULES_DIR
    names = {row.name for row in db.query(RuleDocumentModel.name).all()}
    if rules_dir.is_dir():
        names.update(p.stem for p in rules_dir.glob(f"*{RULE_SUFFIX}"))
    return sorted(names)


def get_rule_source(db: Session, name: str, rules_dir: Optional[Path] = None) -> Optional[str]:
    """YAML source of a rule, or None. The database wins over the rules directory."""
    rules_dir = rules_dir or RULES_DIR
    row = db.query(RuleDocumentModel).filter(RuleDocumentModel.name == validate_rule_name(name)).first()
    if row:
        return row.source
    path = _rule_file(rules_dir, name)
    if path.is_file():
        return path.read_text(encoding="utf-8")
    return None


def save_rule(
    db: Session,
    name: str,
    source: str,
    must_exist: bool = False,
    rules_dir: Optional[Path] = None,
) -> Optional[RuleDocumentModel]:
    """
    Create or overwrite a rule. The source must parse as a rule document
    (MalformedDocumentError otherwise). With must_exist=True, returns None
    instead of creating a rule that does not exist yet.
    """
    validate_rule_name(name)
    parse_rule_document(source)
    row = db.query(RuleDocumentModel).filter(RuleDocumentModel.name == name).first()
    if row is None:
        if must_exist and get_rule_source(db, name, rules_dir) is None:
            return None
        row = RuleDocumentModel(name=name, source=source)
        db.add(row)
        logger.info("Created rule '%s'", name)
    else:
        row.source = source
        logger.info("Updated rule '%s'", name)
    db.commit()
    db.refresh(row)
    return row


def translate_rule(
    db: Session,
    name: str,
    strict: bool = False,
    rules_dir: Optional[Path] = None,
) -> Optional[TranslationResult]:
    """Translate a stored rule to Mermaid. None if the rule does not exist."""
    source = get_rule_source(db, name, rules_dir)
    if source is None:
        return None
    return translate(source, strict=strict, source=name)


def import_rules_dir(db: Session, rules_dir: Optional[Path] = None) -> list[str]:
    """Upsert every *.yaml file of rules_dir into the database. Returns imported names."""
    rules_dir = rules_dir or RULES_DIR
    imported: list[str] = []
    for path in sorted(rules_dir.glob(f"*{RULE_SUFFIX}")):
        try:
            save_rule(db, path.stem, path.read_text(encoding="utf-8"), rules_dir=rules_dir)
        except (InvalidRuleNameError, MalformedDocumentError) as e:
            logger.warning("Skipping %s: %s", path.name, e)
            continue
        imported.append(path.stem)
    return imported


def get_rules_dir() -> Path:
    """Dependency: rules directory used as fallback storage."""
    return RULES_DIR
