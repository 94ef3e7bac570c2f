"""Functional test bootstrap.

Every test here shares one file-backed SQLite database whose schema is
created once per session; the FastAPI app is built once and driven through
TestClient. Behave scenarios build their own database and are unaffected.
"""

from __future__ import annotations

import os
import pathlib
from typing import Any, Dict, Iterator

import pytest

# Must be set before survey_flow reads configuration
_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> Iterator[None]:
    """Session-level bootstrap: build the engine and schema once for the shared DB."""
    from survey_flow.db.base import get_engine, reset_engine
    from survey_flow.db.schema import create_schema

    create_schema(get_engine(os.environ["TEST_DATABASE_URL"]))
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def drain_events() -> Iterator[None]:
    from survey_flow.logic.events import get_buffered_events

    get_buffered_events(clear=True)
    yield
    get_buffered_events(clear=True)


@pytest.fixture(scope="session")
def app():  # type: ignore[no-untyped-def]
    from survey_flow.main import create_app

    return create_app()


@pytest.fixture()
def client(app):  # type: ignore[no-untyped-def]
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session():  # type: ignore[no-untyped-def]
    from survey_flow.db.base import session_scope

    with session_scope() as session:
        yield session


class SurveyApi:
    """Thin helper over TestClient for building surveys and answering them."""

    def __init__(self, client) -> None:  # type: ignore[no-untyped-def]
        self.client = client

    def create_survey(self, title: str = "Conference feedback") -> str:
        res = self.client.post("/surveys", json={"title": title})
        assert res.status_code == 201, res.text
        return res.json()["survey_id"]

    def add_question(self, survey_id: str, **body: Any) -> Dict[str, Any]:
        res = self.client.post(f"/surveys/{survey_id}/questions", json=body)
        assert res.status_code == 201, res.text
        return res.json()

    def scale(self, survey_id: str, title: str = "Overall score", low: int = 1, high: int = 10, **extra: Any) -> Dict[str, Any]:
        return self.add_question(survey_id, title=title, capability="scale", scale_min=low, scale_max=high, **extra)

    def start_response(self, survey_id: str, email: str = "ada@example.com") -> str:
        res = self.client.post(f"/surveys/{survey_id}/responses", json={"participant_email": email})
        assert res.status_code in (200, 201), res.text
        return res.json()["response_id"]

    def save(self, response_id: str, question_id: str, **body: Any):  # type: ignore[no-untyped-def]
        return self.client.put(f"/responses/{response_id}/answers/{question_id}", json=body)

    def completion(self, response_id: str) -> Dict[str, Any]:
        res = self.client.get(f"/responses/{response_id}/completion")
        assert res.status_code == 200, res.text
        return res.json()["completion"]

    def visible_ids(self, response_id: str) -> list:
        res = self.client.get(f"/responses/{response_id}/visibility")
        assert res.status_code == 200, res.text
        return res.json()["visible_question_ids"]


@pytest.fixture()
def api(client) -> SurveyApi:  # type: ignore[no-untyped-def]
    return SurveyApi(client)
