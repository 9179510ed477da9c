"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK raises ``ValueError`` subclasses for structural form defects and
rejected submissions, and ``KeyError`` for unknown form ids.  Rather than
catching these in every route, we install global handlers that pick the
right HTTP status code.  Starlette resolves handlers along the exception's
MRO, so the specific handlers win over the generic ``ValueError`` one.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from questionnaire_rules.errors import FormStructureError, SubmissionRejected

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Response set submitted twice
    ("already submitted", 409),
    # Response set posted to the wrong form
    ("cannot be submitted to form", 400),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (form ids, question ids) stay in the server log; the
# client receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Conflict",
    400: "Invalid request",
}


async def submission_rejected_handler(request: Request, exc: SubmissionRejected) -> JSONResponse:
    """Return 422 with the full validation report so the viewer can mark fields."""
    logger.info("Submission rejected at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Response set is not submittable",
            "report": exc.report.model_dump(),
        },
    )


async def form_structure_error_handler(request: Request, exc: FormStructureError) -> JSONResponse:
    """Structural defects in a form definition make it unusable — 409."""
    logger.error("Form structure error at %s: %s", request.url, exc)
    return JSONResponse(status_code=409, content={"detail": "Form definition is invalid"})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to a contextual HTTP error response.

    The raw exception message is logged server-side but never sent to
    the client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (unknown form id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
