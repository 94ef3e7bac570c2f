"""Serialization of question conditions for the browser mirror.

``conditional_flow.js`` bootstraps from this payload and re-evaluates
visibility on every input change without a server round trip. Keys are
camelCase because the payload is consumed as-is by the browser; fields with
no value are dropped.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from survey_flow.models.conditions import ConditionalType
from survey_flow.models.survey_types import QuestionSpec, order_key


def question_payload(question: QuestionSpec, children_ids: List[str]) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": question.id,
        "type": question.capability.value,
        "required": question.required,
        "isConditional": question.is_conditional,
        "parentId": question.conditional_parent_id,
        "matrixParentId": question.matrix_parent_id,
        "hasConditionals": bool(children_ids),
        "childrenIds": children_ids or None,
    }
    if question.is_conditional:
        data.update(
            {
                "conditionalType": question.conditional_type.value,
                "logicType": question.logic_type.value,
                "showIfMet": question.show_if_condition_met,
            }
        )
        if question.conditional_type is ConditionalType.OPTION:
            data["triggerOptionIds"] = list(question.trigger_option_ids)
        else:
            data.update(
                {
                    "operator": question.operator,
                    "value": question.value,
                    "operator2": question.operator_2,
                    "value2": question.value_2,
                }
            )
    return {k: v for k, v in data.items() if v is not None}


def build_client_payload(
    questions: Iterable[QuestionSpec], survey_id: str | None = None, precision: int | None = None
) -> Dict[str, Any]:
    """Return ``{"surveyId": ..., "precision": ..., "questions": [...]}`` in survey order.

    Matrix parents are included so the browser can locate their containers;
    the mirror skips them when computing visibility, as the server does.
    ``precision`` is the server's completion rounding, so the progress bar
    matches the percentage the API reports.
    """
    ordered = sorted(questions, key=order_key)
    children: Dict[str, List[str]] = {}
    for q in ordered:
        if q.conditional_parent_id is not None:
            children.setdefault(str(q.conditional_parent_id), []).append(q.id)
    payload: Dict[str, Any] = {"questions": [question_payload(q, children.get(q.id, [])) for q in ordered]}
    if survey_id is not None:
        payload["surveyId"] = survey_id
    if precision is not None:
        payload["precision"] = precision
    return payload


__all__ = ["question_payload", "build_client_payload"]
