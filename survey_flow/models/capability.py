"""Closed set of question capabilities.

Each capability carries the predicates the validator and the condition
evaluator need (options support, multi-select, numeric value), so callers
branch on predicates instead of comparing type-name strings.
"""

from __future__ import annotations

from enum import Enum


class Capability(str, Enum):
    TEXT = "text"
    LONG_TEXT = "long_text"
    NUMBER = "number"
    SCALE = "scale"
    BOOLEAN = "boolean"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    RANKING = "ranking"
    MATRIX_ROW = "matrix_row"
    MATRIX_PARENT = "matrix_parent"

    @property
    def supports_options(self) -> bool:
        return self in _OPTION_CAPABILITIES

    @property
    def supports_multiple_selection(self) -> bool:
        return self in (Capability.MULTIPLE_CHOICE, Capability.RANKING)

    @property
    def is_numeric(self) -> bool:
        return self in (Capability.NUMBER, Capability.SCALE)

    @property
    def is_textual(self) -> bool:
        return self in (Capability.TEXT, Capability.LONG_TEXT)

    @property
    def is_answerable(self) -> bool:
        """Matrix parents are containers; every other capability takes an answer."""
        return self is not Capability.MATRIX_PARENT

    @property
    def owns_options(self) -> bool:
        """True when options are stored on the question itself.

        Matrix rows borrow their parent's options and never own any.
        """
        return self.supports_options and self is not Capability.MATRIX_ROW


_OPTION_CAPABILITIES = frozenset(
    {
        Capability.SINGLE_CHOICE,
        Capability.MULTIPLE_CHOICE,
        Capability.RANKING,
        Capability.MATRIX_ROW,
        Capability.MATRIX_PARENT,
    }
)


__all__ = ["Capability"]
