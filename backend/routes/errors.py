"""Map translator errors to HTTP errors."""

from fastapi import HTTPException

from backend.translator import DanglingReferenceError, MalformedDocumentError, TranslationError


def translation_http_error(error: TranslationError) -> HTTPException:
    if isinstance(error, MalformedDocumentError):
        return HTTPException(status_code=400, detail={"message": error.message, "errors": error.errors})
    if isinstance(error, DanglingReferenceError):
        return HTTPException(
            status_code=422,
            detail={
                "message": str(error),
                "condition": error.condition,
                "branch": error.branch,
                "target": error.target,
            },
        )
    return HTTPException(status_code=400, detail=str(error))
