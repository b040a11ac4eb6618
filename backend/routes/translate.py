"""Stateless translation of a YAML rule document posted in the request body."""

import os
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from backend.routes.errors import translation_http_error
from backend.translator import TranslationError, translate

router = APIRouter()

DEFAULT_STRICT = os.getenv("RULECHART_STRICT", "0").lower() in ("1", "true", "yes")


async def read_yaml_body(request: Request) -> str:
    """Request body as text; 400 if it is not UTF-8."""
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="Failed to read request body") from e


@router.post("")
async def translate_document(
    request: Request,
    strict: Optional[bool] = Query(None, description="Fail on next references to unknown conditions"),
):
    """Translate the YAML body to a Mermaid flowchart. Nothing is stored."""
    body = await read_yaml_body(request)
    try:
        result = translate(body, strict=DEFAULT_STRICT if strict is None else strict)
    except TranslationError as e:
        raise translation_http_error(e) from e
    return {
        "diagram": result.diagram,
        "metadata": result.metadata_json(),
        "warnings": [w.model_dump() for w in result.warnings],
    }
