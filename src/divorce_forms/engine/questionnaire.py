"""Questionnaire engine.

Pure functions over a schema and a response snapshot. Nothing is cached
between calls; each call builds its own EvaluationContext, so the engine
can be invoked repeatedly and concurrently with different snapshots.
"""

import logging
import math
import re
from typing import Any, List, Mapping, Optional

from ..models.enums import ConditionEffect, ValidationKind
from ..models.responses import ResponseValue, coerce_number, is_answered, normalize_value, parse_date
from ..models.schema import EMAIL_PATTERN, Question, Schema, Section, ValidationRule
from .context import EvaluationContext
from .results import (
    Progress,
    QuestionnaireSnapshot,
    QuestionnaireValidation,
    QuestionValidation,
    SectionProgress,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Visibility
# ============================================================================

def _visible_sections(ctx: EvaluationContext) -> List[Section]:
    sections = []
    for section in ctx.schema.sections:
        if not ctx.is_section_shown(section):
            continue
        if not section.questions or any(ctx.visible(q) for q in section.questions):
            sections.append(section)
    return sections


def _visible_questions(ctx: EvaluationContext, section: Section) -> List[Question]:
    return [q for q in section.questions if ctx.visible(q)]


def visible_sections(schema: Schema, responses: Mapping[str, Any]) -> List[Section]:
    """
    Get the sections currently shown, in schema order.

    A section is shown when its own conditions hold and it has at least one
    visible question. Sections without questions are shown on their
    conditions alone.

    Args:
        schema: Questionnaire schema.
        responses: Current response snapshot.

    Returns:
        Ordered list of visible sections.
    """
    return _visible_sections(EvaluationContext(schema, responses))


def visible_questions(
    schema: Schema,
    responses: Mapping[str, Any],
    section_id: str
) -> List[Question]:
    """
    Get the questions of a section currently shown, in schema order.

    Args:
        schema: Questionnaire schema.
        responses: Current response snapshot.
        section_id: Section to inspect.

    Returns:
        Ordered list of visible questions; empty for an unknown section.
    """
    section = schema.section(section_id)
    if section is None:
        return []
    return _visible_questions(EvaluationContext(schema, responses), section)


# ============================================================================
# Requiredness
# ============================================================================

def _effective_required(ctx: EvaluationContext, question: Question) -> bool:
    required = question.required
    relaxed = False
    for condition in question.conditions:
        if condition.effect is ConditionEffect.REQUIRE and ctx.fires(condition):
            return True
        if condition.effect is ConditionEffect.RELAX and ctx.fires(condition):
            relaxed = True
    return False if relaxed else required


def effective_required(
    question: Question,
    responses: Mapping[str, Any],
    schema: Optional[Schema] = None
) -> bool:
    """
    Resolve whether a question is required for a response snapshot.

    A firing require rule makes the question required; a firing relax rule
    makes it optional. When both fire, require wins.

    Args:
        question: Question to resolve.
        responses: Current response snapshot.
        schema: Owning schema. When given, hidden source questions read as
            unanswered.

    Returns:
        True when an answer is needed.
    """
    return _effective_required(EvaluationContext(schema, responses), question)


# ============================================================================
# Validation
# ============================================================================

def _format_threshold(threshold: Any) -> str:
    number = coerce_number(threshold)
    if number is not None and number.is_integer():
        return str(int(number))
    return str(threshold)


def _measure(value: ResponseValue) -> Optional[float]:
    if isinstance(value, list):
        return float(len(value))
    return coerce_number(value)


def _rule_error(rule: ValidationRule, value: ResponseValue, question: Question) -> Optional[str]:
    """Check one non-required rule against an answered value."""
    label = question.label

    if rule.kind is ValidationKind.MIN:
        measured = _measure(value)
        threshold = coerce_number(rule.value)
        if measured is None or (threshold is not None and measured < threshold):
            return rule.message or f"{label} must be at least {_format_threshold(rule.value)}"
    elif rule.kind is ValidationKind.MAX:
        measured = _measure(value)
        threshold = coerce_number(rule.value)
        if measured is None or (threshold is not None and measured > threshold):
            return rule.message or f"{label} must be at most {_format_threshold(rule.value)}"
    elif rule.kind is ValidationKind.PATTERN:
        if rule.value:
            text = ", ".join(value) if isinstance(value, list) else str(value)
            if not re.search(str(rule.value), text):
                return rule.message or f"{label} format is invalid"
    elif rule.kind is ValidationKind.EMAIL:
        if not EMAIL_PATTERN.match(str(value)):
            return rule.message or f"{label} must be a valid email address"
    elif rule.kind is ValidationKind.DATE:
        if parse_date(value) is None:
            return rule.message or f"{label} must be a valid date"
    return None


def _validate(ctx: EvaluationContext, question: Question, value: Any) -> QuestionValidation:
    result = QuestionValidation(question_id=question.id)
    if not ctx.visible(question):
        return result

    value = normalize_value(value)
    if not is_answered(value):
        if _effective_required(ctx, question):
            required_rule = next(
                (r for r in question.validation_rules if r.kind is ValidationKind.REQUIRED),
                None
            )
            message = required_rule.message if required_rule and required_rule.message else None
            result.errors.append(message or f"{question.label} is required")
        return result

    type_error = question.type_error(value)
    if type_error:
        result.errors.append(type_error)
        return result

    seen = set()
    for rule in question.validation_rules:
        if rule.kind is ValidationKind.REQUIRED or rule.kind in seen:
            continue
        error = _rule_error(rule, value, question)
        if error:
            seen.add(rule.kind)
            result.errors.append(error)
    return result


def validate_question(
    question: Question,
    value: Any,
    responses: Mapping[str, Any],
    schema: Optional[Schema] = None
) -> QuestionValidation:
    """
    Validate one answer.

    Hidden questions are always valid. An unanswered question fails only
    when effectively required. An answered value is checked against its
    question type first, then against each rule in declared order,
    reporting at most one message per rule kind.

    Args:
        question: Question being answered.
        value: Candidate answer.
        responses: Current response snapshot, used for conditions.
        schema: Owning schema. Without it only the question's own
            conditions decide visibility.

    Returns:
        Per-question validation result. Never raises for bad input.
    """
    return _validate(EvaluationContext(schema, responses), question, value)


def _validate_all(ctx: EvaluationContext) -> QuestionnaireValidation:
    errors = {}
    for section in _visible_sections(ctx):
        for question in _visible_questions(ctx, section):
            result = _validate(ctx, question, ctx.responses.get(question.id))
            if not result.valid:
                errors[question.id] = result.errors
    first = next(iter(errors), None)
    return QuestionnaireValidation(
        valid=not errors,
        errors_by_question=errors,
        first_failing_question=first
    )


def validate_all(schema: Schema, responses: Mapping[str, Any]) -> QuestionnaireValidation:
    """
    Validate every visible question of a response snapshot.

    Hidden questions never produce errors, whatever value is stored for
    them.

    Args:
        schema: Questionnaire schema.
        responses: Response snapshot to validate.

    Returns:
        Aggregated result with errors keyed by question id in schema order.
    """
    return _validate_all(EvaluationContext(schema, responses))


# ============================================================================
# Progress
# ============================================================================

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _progress(ctx: EvaluationContext) -> Progress:
    sections = []
    answered_total = 0
    required_total = 0
    for section in _visible_sections(ctx):
        required = [
            q for q in _visible_questions(ctx, section)
            if _effective_required(ctx, q)
        ]
        answered = sum(1 for q in required if is_answered(ctx.responses.get(q.id)))
        sections.append(SectionProgress(
            section_id=section.id,
            complete=answered == len(required),
            answered_required=answered,
            total_required=len(required)
        ))
        answered_total += answered
        required_total += len(required)

    if required_total == 0:
        percentage = 100
    else:
        percentage = _round_half_up(answered_total * 100 / required_total)
    return Progress(
        progress_percentage=percentage,
        sections=sections,
        answered_required=answered_total,
        total_required=required_total
    )


def progress(schema: Schema, responses: Mapping[str, Any]) -> Progress:
    """
    Compute completion of a response snapshot.

    The percentage is answered / total over visible, effectively required
    questions, rounded half up; with nothing required it is 100.

    Args:
        schema: Questionnaire schema.
        responses: Current response snapshot.

    Returns:
        Progress value with per-section completion.
    """
    return _progress(EvaluationContext(schema, responses))


def evaluate(schema: Schema, responses: Mapping[str, Any]) -> QuestionnaireSnapshot:
    """Compute visibility, requiredness, validation and progress in one pass."""
    ctx = EvaluationContext(schema, responses)
    sections = _visible_sections(ctx)
    questions = {s.id: [q.id for q in _visible_questions(ctx, s)] for s in sections}
    required = [
        q.id for s in sections for q in _visible_questions(ctx, s)
        if _effective_required(ctx, q)
    ]
    return QuestionnaireSnapshot(
        schema_id=schema.id,
        visible_sections=[s.id for s in sections],
        visible_questions=questions,
        required_questions=required,
        validation=_validate_all(ctx),
        progress=_progress(ctx)
    )
