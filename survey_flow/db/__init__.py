"""Database bootstrap utilities for the survey flow service.

Exposes engine/session construction and schema creation. Route handlers
work with ORM rows returned by the repositories in ``survey_flow.logic``
and by the lookup helpers in ``survey_flow.routes.common``; the rule engine
only ever sees the plain snapshots in ``survey_flow.models.survey_types``.
"""

from survey_flow.db.base import get_engine, get_session, get_sessionmaker, reset_engine, session_scope
from survey_flow.db.schema import create_schema

__all__ = [
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "reset_engine",
    "session_scope",
    "create_schema",
]
