"""
CRUD and diagram routes for named rule documents.

Rule bodies travel as raw YAML text, not JSON.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.routes.errors import translation_http_error
from backend.routes.translate import DEFAULT_STRICT, read_yaml_body
from backend.services.rules_service import (
    InvalidRuleNameError,
    get_rule_source,
    get_rules_dir,
    list_rule_names,
    save_rule,
    translate_rule,
)
from backend.translator import TranslationError

router = APIRouter()


@router.get("", response_model=list[str])
def list_rules(db: Session = Depends(get_db), rules_dir: Path = Depends(get_rules_dir)):
    """List names of available rule documents."""
    return list_rule_names(db, rules_dir)


@router.get("/{name}", response_class=Response)
def get_rule(name: str, db: Session = Depends(get_db), rules_dir: Path = Depends(get_rules_dir)):
    """Return the YAML source of a rule."""
    try:
        source = get_rule_source(db, name, rules_dir)
    except InvalidRuleNameError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if source is None:
        raise HTTPException(status_code=404, detail="Rule not found")
    return Response(content=source, media_type="application/yaml")


@router.post("/{name}", status_code=201, response_class=PlainTextResponse)
async def create_rule(
    name: str,
    request: Request,
    db: Session = Depends(get_db),
    rules_dir: Path = Depends(get_rules_dir),
):
    """Create (or overwrite) a rule from a YAML body."""
    source = await read_yaml_body(request)
    try:
        save_rule(db, name, source, rules_dir=rules_dir)
    except InvalidRuleNameError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except TranslationError as e:
        raise translation_http_error(e) from e
    return PlainTextResponse("Rule created successfully", status_code=201)


@router.put("/{name}", response_class=PlainTextResponse)
async def update_rule(
    name: str,
    request: Request,
    db: Session = Depends(get_db),
    rules_dir: Path = Depends(get_rules_dir),
):
    """Replace an existing rule with a YAML body."""
    source = await read_yaml_body(request)
    try:
        row = save_rule(db, name, source, must_exist=True, rules_dir=rules_dir)
    except InvalidRuleNameError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except TranslationError as e:
        raise translation_http_error(e) from e
    if row is None:
        raise HTTPException(status_code=404, detail="Rule not found")
    return PlainTextResponse("Rule updated successfully")


@router.get("/{name}/mermaid")
def get_rule_diagram(
    name: str,
    strict: Optional[bool] = Query(None, description="Fail on next references to unknown conditions"),
    db: Session = Depends(get_db),
    rules_dir: Path = Depends(get_rules_dir),
):
    """Translate a stored rule to a Mermaid flowchart with node metadata."""
    try:
        result = translate_rule(db, name, strict=DEFAULT_STRICT if strict is None else strict, rules_dir=rules_dir)
    except InvalidRuleNameError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except TranslationError as e:
        raise translation_http_error(e) from e
    if result is None:
        raise HTTPException(status_code=404, detail="Rule not found")
    return {
        "name": name,
        "diagram": result.diagram,
        "metadata": result.metadata_json(),
        "warnings": [w.model_dump() for w in result.warnings],
    }
