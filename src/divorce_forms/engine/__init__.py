"""Questionnaire engine: visibility, requiredness, validation and progress."""

from .context import EvaluationContext
from .questionnaire import (
    effective_required,
    evaluate,
    progress,
    validate_all,
    validate_question,
    visible_questions,
    visible_sections,
)
from .results import (
    Progress,
    QuestionnaireSnapshot,
    QuestionnaireValidation,
    QuestionValidation,
    SectionProgress,
)
from .rules import OPERATOR_ALIASES, evaluate_condition, parse_operator, values_equal

__all__ = [
    "EvaluationContext",
    "effective_required",
    "evaluate",
    "progress",
    "validate_all",
    "validate_question",
    "visible_questions",
    "visible_sections",
    "Progress",
    "QuestionnaireSnapshot",
    "QuestionnaireValidation",
    "QuestionValidation",
    "SectionProgress",
    "OPERATOR_ALIASES",
    "evaluate_condition",
    "parse_operator",
    "values_equal",
]
