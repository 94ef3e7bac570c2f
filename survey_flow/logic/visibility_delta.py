"""Helpers to compute visibility deltas and suppressed answers.

Exposes a single function that computes now_visible, now_hidden and the list
of suppressed answers using a caller-provided lookup for answer existence.
"""

from __future__ import annotations

from typing import Callable, Iterable, List

from survey_flow.models.visibility import VisibilityDelta


def compute_visibility_delta(
    pre_visible: Iterable[str],
    post_visible: Iterable[str],
    has_answer: Callable[[str], bool],
) -> VisibilityDelta:
    """Compute visibility delta and suppressed answers.

    - now_visible: questions newly visible (in post but not in pre)
    - now_hidden: questions newly hidden (in pre but not in post)
    - suppressed_answers: subset of now_hidden that currently have stored answers

    Both inputs are expected in survey order and the outputs keep it.
    Exceptions raised by ``has_answer`` propagate to the caller.
    """
    pre_ids = [str(qid) for qid in pre_visible]
    post_ids = [str(qid) for qid in post_visible]
    pre_set = set(pre_ids)
    post_set = set(post_ids)

    now_visible = [qid for qid in post_ids if qid not in pre_set]
    now_hidden = [qid for qid in pre_ids if qid not in post_set]
    suppressed_answers: List[str] = [qid for qid in now_hidden if has_answer(qid)]
    return VisibilityDelta(
        now_visible=now_visible,
        now_hidden=now_hidden,
        suppressed_answers=suppressed_answers,
    )


__all__ = ["compute_visibility_delta"]
