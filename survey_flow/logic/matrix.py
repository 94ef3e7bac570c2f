"""Matrix parent/row helpers.

A matrix parent owns the shared option set; each row is answered on its own
against the parent's options. Rows never own options, so their effective
options are always read from the parent.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from survey_flow.models.survey_types import OptionSpec, QuestionSpec, order_key


def index_questions(questions: Iterable[QuestionSpec]) -> dict[str, QuestionSpec]:
    return {q.id: q for q in questions}


def matrix_rows(parent: QuestionSpec, questions: Iterable[QuestionSpec]) -> list[QuestionSpec]:
    """Rows of ``parent`` in survey order."""
    return sorted((q for q in questions if q.matrix_parent_id == parent.id), key=order_key)


def effective_options(
    question: QuestionSpec,
    questions_by_id: Mapping[str, QuestionSpec],
) -> list[OptionSpec]:
    """Options an answer to ``question`` is validated against.

    A row whose parent is missing has no valid options.
    """
    if question.is_matrix_row:
        parent = questions_by_id.get(str(question.matrix_parent_id))
        return list(parent.options) if parent is not None else []
    return list(question.options)


def row_label(row: QuestionSpec, questions_by_id: Mapping[str, QuestionSpec]) -> str:
    """Display label for a row: ``"<parent title> - <row text>"``."""
    parent = questions_by_id.get(str(row.matrix_parent_id))
    text = row.matrix_row_text or row.title
    return f"{parent.title} - {text}" if parent is not None else text


__all__ = ["index_questions", "matrix_rows", "effective_options", "row_label"]
