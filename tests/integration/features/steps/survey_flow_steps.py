"""Step definitions for the conditional question flow feature.

Steps talk to the API through ``context.http`` (an httpx client, or the
TestClient in in-process mode) and validate bodies against the contracts
under docs/schemas/ with Draft 2020-12.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from behave import given, then, when
from jsonschema import Draft202012Validator, FormatChecker
from referencing import Registry, Resource

SCHEMAS_DIR = Path(__file__).resolve().parents[4] / "docs" / "schemas"


# ------------------
# Schema helpers
# ------------------


def _schema_registry() -> tuple[Registry, Dict[str, Dict[str, Any]]]:
    schemas: Dict[str, Dict[str, Any]] = {}
    resources = []
    for path in sorted(SCHEMAS_DIR.glob("*.schema.json")):
        schema = json.loads(path.read_text(encoding="utf-8"))
        schemas[path.name] = schema
        resources.append((schema["$id"], Resource.from_contents(schema)))
    return Registry().with_resources(resources), schemas


_REGISTRY, _SCHEMAS = _schema_registry()


def _validate(instance: Any, schema_name: str) -> None:
    assert schema_name in _SCHEMAS, f"Unknown schema {schema_name}; have {sorted(_SCHEMAS)}"
    validator = Draft202012Validator(_SCHEMAS[schema_name], registry=_REGISTRY, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    assert not errors, f"{schema_name} violations: " + "; ".join(
        f"{'/'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
    )


# ------------------
# HTTP helpers
# ------------------


def _request(context, method: str, path: str, json_body: Any = None):  # type: ignore[no-untyped-def]
    resp = context.http.request(method, path, json=json_body)
    context.last_response = resp
    print(f"[HTTP] {method} {path} -> {resp.status_code} xrid={resp.headers.get('X-Request-ID', '-')}")
    return resp


def _ok(resp, *codes: int) -> Dict[str, Any]:  # type: ignore[no-untyped-def]
    expected = codes or (200,)
    assert resp.status_code in expected, f"Expected {expected}, got {resp.status_code}: {resp.text}"
    return resp.json()


def _qid(context, alias: str) -> str:  # type: ignore[no-untyped-def]
    questions = context.vars["questions"]
    assert alias in questions, f"Question {alias!r} was not created in this scenario"
    return questions[alias]


def _labels(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def _add_question(context, alias: str, body: Dict[str, Any]) -> Dict[str, Any]:  # type: ignore[no-untyped-def]
    body.setdefault("title", alias)
    resp = _request(context, "POST", f"/surveys/{context.vars['survey_id']}/questions", body)
    question = _ok(resp, 201)
    context.vars["questions"][alias] = question["id"]
    for option in question.get("options") or []:
        context.vars["options"][(alias, option["option_text"])] = option["id"]
    return question


def _option_ids(context, alias: str, labels: str) -> List[str]:  # type: ignore[no-untyped-def]
    return [context.vars["options"][(alias, label)] for label in _labels(labels)]


def _save(context, alias: str, body: Dict[str, Any]):  # type: ignore[no-untyped-def]
    path = f"/responses/{context.vars['response_id']}/answers/{_qid(context, alias)}"
    resp = _request(context, "PUT", path, body)
    if resp.status_code == 200:
        context.vars["last_saved"] = resp.json()
    return resp


def _visible_ids(context) -> List[str]:  # type: ignore[no-untyped-def]
    resp = context.http.get(f"/responses/{context.vars['response_id']}/visibility")
    return _ok(resp)["visible_question_ids"]


# ------------------
# Given steps
# ------------------


@given('a survey "{title}" exists')
def step_survey_exists(context, title: str) -> None:
    survey = _ok(_request(context, "POST", "/surveys", {"title": title}), 201)
    context.vars["survey_id"] = survey["survey_id"]


@given('a scale question "{alias}" from {low:d} to {high:d} is added')
def step_scale_question(context, alias: str, low: int, high: int) -> None:
    _add_question(context, alias, {"capability": "scale", "scale_min": low, "scale_max": high})


@given('a text question "{alias}" is added')
def step_text_question(context, alias: str) -> None:
    _add_question(context, alias, {"capability": "text"})


@given('a required text question "{alias}" is shown when "{parent}" is "{operator}" {value:g}')
def step_scale_conditional(context, alias: str, parent: str, operator: str, value: float) -> None:
    _add_question(
        context,
        alias,
        {
            "capability": "text",
            "required": True,
            "conditional_parent_id": _qid(context, parent),
            "operator": operator,
            "value": value,
        },
    )


@given('a multiple choice question "{alias}" with options "{labels}" is added')
def step_multiple_choice(context, alias: str, labels: str) -> None:
    options = [{"option_text": label} for label in _labels(labels)]
    _add_question(context, alias, {"capability": "multiple_choice", "options": options})


@given('a text question "{alias}" is shown when "{parent}" includes "{labels}"')
def step_option_conditional(context, alias: str, parent: str, labels: str) -> None:
    _add_question(
        context,
        alias,
        {
            "capability": "text",
            "conditional_parent_id": _qid(context, parent),
            "conditional_type": "option",
            "trigger_option_ids": _option_ids(context, parent, labels),
        },
    )


@given('participant "{email}" has started a response')
def step_response_started(context, email: str) -> None:
    path = f"/surveys/{context.vars['survey_id']}/responses"
    response = _ok(_request(context, "POST", path, {"participant_email": email}), 200, 201)
    context.vars["response_id"] = response["response_id"]


# ------------------
# When steps
# ------------------


@when('I answer "{alias}" with number {value:g}')
def step_answer_number(context, alias: str, value: float) -> None:
    _save(context, alias, {"number": value})


@when('I answer "{alias}" with text "{text}"')
def step_answer_text(context, alias: str, text: str) -> None:
    _save(context, alias, {"text": text})


@when('I answer "{alias}" with options "{labels}"')
def step_answer_options(context, alias: str, labels: str) -> None:
    _save(context, alias, {"option_ids": _option_ids(context, alias, labels)})


@when("I submit the response")
def step_submit(context) -> None:
    _request(context, "POST", f"/responses/{context.vars['response_id']}/complete")


@when("I request the visibility of the response")
def step_request_visibility(context) -> None:
    _request(context, "GET", f"/responses/{context.vars['response_id']}/visibility")


@when("I request the client config")
def step_request_client_config(context) -> None:
    _request(context, "GET", f"/surveys/{context.vars['survey_id']}/client-config")


# ------------------
# Then steps
# ------------------


@then("the response status is {code:d}")
def step_status(context, code: int) -> None:
    resp = context.last_response
    assert resp is not None, "No request has been made"
    assert resp.status_code == code, f"Expected {code}, got {resp.status_code}: {resp.text}"
    if code >= 400:
        ctype = resp.headers.get("content-type", "")
        assert ctype.startswith("application/problem+json"), f"Expected problem+json, got {ctype}"


@then('the body validates against "{schema_name}"')
def step_body_validates(context, schema_name: str) -> None:
    _validate(context.last_response.json(), schema_name)


@then('the problem code is "{code}"')
def step_problem_code(context, code: str) -> None:
    assert context.last_response.json().get("code") == code, context.last_response.text


@then('question "{alias}" became visible')
def step_became_visible(context, alias: str) -> None:
    delta = context.vars["last_saved"]["visibility_delta"]
    assert _qid(context, alias) in delta["now_visible"], delta


@then('question "{alias}" became hidden with a suppressed answer')
def step_became_hidden(context, alias: str) -> None:
    delta = context.vars["last_saved"]["visibility_delta"]
    qid = _qid(context, alias)
    assert qid in delta["now_hidden"], delta
    assert qid in delta["suppressed_answers"], delta


@then('question "{alias}" is not visible')
def step_not_visible(context, alias: str) -> None:
    assert _qid(context, alias) not in _visible_ids(context)


@then('the visible questions are "{aliases}"')
def step_visible_questions(context, aliases: str) -> None:
    expected = [_qid(context, alias) for alias in _labels(aliases)]
    assert _visible_ids(context) == expected


@then("the completion percentage is {percentage:g}")
def step_completion_percentage(context, percentage: float) -> None:
    resp = context.http.get(f"/responses/{context.vars['response_id']}/completion")
    actual = _ok(resp)["completion"]["percentage"]
    assert abs(actual - percentage) < 1e-9, f"Expected {percentage}, got {actual}"


@then("the response has an X-Request-ID header")
def step_has_request_id(context) -> None:
    assert context.last_response.headers.get("X-Request-ID"), "X-Request-ID header missing"
