"""FastAPI application factory.

Wires logging, configuration, the database schema, problem+json handlers,
the request-id middleware, the API routers and the static mount serving the
browser conditional flow script.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles

from survey_flow.config import AppConfig, load_config
from survey_flow.db.base import get_engine
from survey_flow.db.schema import create_schema
from survey_flow.http.problem import (
    handle_answer_shape_error,
    handle_configuration_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from survey_flow.http.request_id import RequestIdMiddleware
from survey_flow.logging_setup import configure_logging
from survey_flow.logic.question_config import ConfigurationError
from survey_flow.logic.validation import AnswerShapeError
from survey_flow.routes import api_router

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(config: AppConfig | None = None) -> FastAPI:
    config = config or load_config()
    configure_logging(config.logging.level)

    engine = get_engine(config.database.dsn, echo=config.database.echo)
    create_schema(engine)

    app = FastAPI(title="Survey Flow")
    app.state.config = config

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ConfigurationError, handle_configuration_error)
    app.add_exception_handler(AnswerShapeError, handle_answer_shape_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)
    if config.client.mount_static:
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "db": engine.dialect.name}

    logger.info(
        "app_created dialect=%s static=%s precision=%s",
        engine.dialect.name,
        config.client.mount_static,
        config.completion.precision,
    )
    return app


__all__ = ["create_app", "STATIC_DIR"]
