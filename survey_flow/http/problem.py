"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and handler callables that produce
application/problem+json responses for HTTP errors, request validation
errors, rejected question configurations, rejected answer shapes and
anything unexpected.
"""

from __future__ import annotations

import logging
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from survey_flow.logic.question_config import ConfigurationError
from survey_flow.logic.validation import AnswerShapeError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem(status: int, title: str, detail: str | None = None, **extra) -> dict:  # type: ignore[no-untyped-def]
    body = {"title": title, "status": int(status)}
    if detail:
        body["detail"] = detail
    body.update(extra)
    return body


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        body = {"status": status_code, **exc.detail}
    else:
        body = problem(status_code, "Error", str(exc.detail or ""))
    return JSONResponse(
        body,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=dict(exc.headers) if exc.headers else None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    body = problem(
        422,
        "Invalid Request",
        "Request validation failed",
        errors=jsonable_encoder(exc.errors()),
    )
    return JSONResponse(body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:  # noqa: D401
    logger.info("configuration_rejected path=%s code=%s", request.url.path, exc.code)
    body = problem(422, "Invalid Question Configuration", exc.message, code=exc.code)
    return JSONResponse(body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_answer_shape_error(request: Request, exc: AnswerShapeError) -> JSONResponse:  # noqa: D401
    logger.info("answer_rejected path=%s field=%s", request.url.path, exc.field)
    body = problem(
        422,
        "Invalid Answer",
        exc.message,
        code="ANSWER_SHAPE_INVALID",
        errors=[exc.to_error()],
    )
    return JSONResponse(body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        problem(500, "Internal Server Error"),
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_configuration_error",
    "handle_answer_shape_error",
    "handle_unexpected_error",
]
