"""Schema bootstrap.

Creates the tables declared in ``survey_flow.models.orm`` when they do not
exist. Intended for local development, tests and single-node deployments;
production environments should manage schema changes with Alembic.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from survey_flow.models.orm import Base

logger = logging.getLogger(__name__)


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)
    logger.info("schema_ready tables=%s", sorted(Base.metadata.tables))


__all__ = ["create_schema"]
