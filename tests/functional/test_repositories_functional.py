"""Functional tests for the persistence helpers, run against the shared SQLite DB."""

from __future__ import annotations

from sqlalchemy import func, select

from survey_flow.db.base import session_scope
from survey_flow.logic import repository_answers, repository_responses
from survey_flow.logic.repository_answers import answer_id_for, get_answer, load_answers, upsert_answer
from survey_flow.logic.repository_questions import create_question, load_question_specs
from survey_flow.logic.repository_responses import get_or_create_response, get_response, mark_completed
from survey_flow.logic.repository_surveys import create_survey
from survey_flow.logic.response_state import load_response_state
from survey_flow.models.authoring_types import QuestionCreate
from survey_flow.models.orm import Answer, AnswerOption, Question, Response, Survey
from survey_flow.models.survey_types import AnswerValue


def _survey_with_choice(session):  # type: ignore[no-untyped-def]
    survey = create_survey(session, "  Workshop survey  ")
    spec = create_question(
        session,
        survey,
        QuestionCreate(
            title="Topics",
            capability="multiple_choice",
            options=[{"option_text": "APIs"}, {"option_text": "Testing"}, {"option_text": "Ops"}],
        ),
    )
    return survey, spec


def test_survey_title_is_trimmed(db_session):  # type: ignore[no-untyped-def]
    assert create_survey(db_session, "  Spaced  ").title == "Spaced"


def test_options_get_positions_in_submission_order(db_session):  # type: ignore[no-untyped-def]
    survey, spec = _survey_with_choice(db_session)
    assert [o.order_position for o in spec.options] == [1, 2, 3]
    stored = load_question_specs(db_session, survey.survey_id)[0]
    assert [o.option_text for o in stored.options] == ["APIs", "Testing", "Ops"]


def test_get_or_create_response_reuses_the_participant_row(db_session):  # type: ignore[no-untyped-def]
    survey, _spec = _survey_with_choice(db_session)
    first, created = get_or_create_response(db_session, survey, "grace@example.com")
    again, created_again = get_or_create_response(db_session, survey, "grace@example.com")
    other, created_other = get_or_create_response(db_session, survey, "alan@example.com")
    assert (created, created_again, created_other) == (True, False, True)
    assert first.response_id == again.response_id != other.response_id


def test_mark_completed_keeps_first_stamp(db_session):  # type: ignore[no-untyped-def]
    survey, _spec = _survey_with_choice(db_session)
    response, _ = get_or_create_response(db_session, survey, "grace@example.com")
    stamp = mark_completed(db_session, response)
    assert mark_completed(db_session, response) == stamp


def test_upsert_updates_in_place_and_reuses_option_rows(db_session):  # type: ignore[no-untyped-def]
    survey, spec = _survey_with_choice(db_session)
    apis, testing, ops = (o.id for o in spec.options)
    response, _ = get_or_create_response(db_session, survey, "grace@example.com")
    question = survey.questions[0]

    answer, created = upsert_answer(
        db_session, response, question, AnswerValue(question_id=spec.id, option_ids=[apis, testing])
    )
    assert created is True
    assert answer.answer_id == answer_id_for(response.response_id, spec.id)
    kept_link_id = next(link.id for link in answer.answer_options if link.option_id == testing)

    again, created = upsert_answer(
        db_session, response, question, AnswerValue(question_id=spec.id, option_ids=[testing, ops])
    )
    assert created is False
    assert again is answer
    links = {link.option_id: link.id for link in again.answer_options}
    assert set(links) == {testing, ops}
    assert links[testing] == kept_link_id

    count = db_session.scalar(select(func.count()).select_from(Answer).where(Answer.response_id == response.response_id))
    assert count == 1
    remaining = db_session.scalar(
        select(func.count()).select_from(AnswerOption).where(AnswerOption.answer_id == answer.answer_id)
    )
    assert remaining == 2


def test_load_answers_and_response_state(db_session):  # type: ignore[no-untyped-def]
    survey, spec = _survey_with_choice(db_session)
    response, _ = get_or_create_response(db_session, survey, "grace@example.com")
    upsert_answer(db_session, response, survey.questions[0], AnswerValue(question_id=spec.id, option_ids=[spec.options[0].id]))

    answers = load_answers(db_session, response.response_id)
    assert answers[spec.id].option_ids == [spec.options[0].id]
    assert get_answer(db_session, response.response_id, "missing") is None

    state = load_response_state(db_session, response)
    assert state.visible_ids() == [spec.id]
    assert state.completion().percentage == 100.0


def _stale_once(real):  # type: ignore[no-untyped-def]
    """Wrap a lookup so its first call misses, as a reader racing another writer would."""
    calls = []

    def lookup(*args):  # type: ignore[no-untyped-def]
        calls.append(args)
        if len(calls) == 1:
            return None
        return real(*args)

    return lookup


def test_racing_first_answer_save_retries_as_update(monkeypatch):  # type: ignore[no-untyped-def]
    with session_scope() as session:
        survey, spec = _survey_with_choice(session)
        response, _ = get_or_create_response(session, survey, "grace@example.com")
        response_id, question_id = response.response_id, spec.id
        apis, testing, ops = (o.id for o in spec.options)

    with session_scope() as session:
        upsert_answer(
            session,
            get_response(session, response_id),
            session.get(Question, question_id),
            AnswerValue(question_id=question_id, option_ids=[apis]),
        )

    monkeypatch.setattr(repository_answers, "get_answer", _stale_once(repository_answers.get_answer))
    with session_scope() as session:
        answer, created = repository_answers.upsert_answer(
            session,
            get_response(session, response_id),
            session.get(Question, question_id),
            AnswerValue(question_id=question_id, option_ids=[testing, ops]),
        )
        assert created is False
        assert answer.answer_id == answer_id_for(response_id, question_id)
    monkeypatch.undo()

    with session_scope() as session:
        count = session.scalar(select(func.count()).select_from(Answer).where(Answer.response_id == response_id))
        assert count == 1
        assert sorted(load_answers(session, response_id)[question_id].option_ids) == sorted([testing, ops])


def test_racing_response_create_reuses_the_winner(monkeypatch):  # type: ignore[no-untyped-def]
    with session_scope() as session:
        survey, _spec = _survey_with_choice(session)
        survey_id = survey.survey_id

    with session_scope() as session:
        winner, created = get_or_create_response(session, session.get(Survey, survey_id), "alan@example.com")
        assert created is True
        winner_id = winner.response_id

    monkeypatch.setattr(repository_responses, "find_response", _stale_once(repository_responses.find_response))
    with session_scope() as session:
        response, created = repository_responses.get_or_create_response(
            session, session.get(Survey, survey_id), "alan@example.com"
        )
        assert created is False
        assert response.response_id == winner_id
    monkeypatch.undo()

    with session_scope() as session:
        count = session.scalar(
            select(func.count())
            .select_from(Response)
            .where(Response.survey_id == survey_id, Response.participant_email == "alan@example.com")
        )
        assert count == 1
