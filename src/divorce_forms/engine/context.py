"""Per-call evaluation context for the questionnaire engine.

A context lives for exactly one engine call. It normalizes the response
snapshot once and memoizes visibility so that chains of conditions are
resolved once per question. Nothing outlives the call.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..models.enums import ConditionEffect
from ..models.responses import ResponseMap, ResponseValue, normalize_responses
from ..models.schema import Condition, Question, Schema, Section
from .rules import evaluate_condition

logger = logging.getLogger(__name__)

_VISIBILITY_EFFECTS = (ConditionEffect.SHOW, ConditionEffect.HIDE)


class EvaluationContext:
    """
    Visibility and value resolution over one response snapshot.

    Args:
        schema: Schema the questions belong to. Without a schema, condition
            sources are read directly from the responses and never masked.
        responses: Raw response snapshot; normalized on construction.
    """

    def __init__(self, schema: Optional[Schema], responses: Optional[Mapping[str, Any]]):
        self.schema = schema
        self.responses: ResponseMap = normalize_responses(responses)
        self._visible: Dict[str, bool] = {}
        self._in_progress: set = set()

    def value_of(self, question_id: str) -> ResponseValue:
        """
        Read the answer a condition sees for a source question.

        A source question that is hidden reads as unanswered, so stale
        answers behind a changed branch never drive other conditions.
        """
        if self.schema is not None and self.schema.question(question_id) is not None:
            if not self.is_question_visible(question_id):
                return None
        return self.responses.get(question_id)

    def fires(self, condition: Condition) -> bool:
        return evaluate_condition(
            condition.operator,
            self.value_of(condition.source_question_id),
            condition.value
        )

    def conditions_show(self, conditions) -> bool:
        """
        Resolve show/hide conditions.

        Show rules are AND-combined; any firing hide rule hides. No
        visibility rules means shown.
        """
        for condition in conditions:
            if condition.effect not in _VISIBILITY_EFFECTS:
                continue
            fired = self.fires(condition)
            if condition.effect is ConditionEffect.SHOW and not fired:
                return False
            if condition.effect is ConditionEffect.HIDE and fired:
                return False
        return True

    def is_section_shown(self, section: Section) -> bool:
        """Check a section's own conditions, ignoring its questions."""
        return self.conditions_show(section.conditions)

    def is_question_visible(self, question_id: str) -> bool:
        """
        Check whether a question is shown.

        A question is shown when its section's conditions and its own
        conditions both hold. Questions on a conditional cycle are hidden.
        """
        if question_id in self._visible:
            return self._visible[question_id]
        if self.schema is None:
            return True
        question = self.schema.question(question_id)
        if question is None:
            return False
        if question_id in self.schema.cyclic_question_ids:
            self._visible[question_id] = False
            return False
        if question_id in self._in_progress:
            logger.warning(f"Conditional cycle reached at question '{question_id}'; hiding it")
            return False

        self._in_progress.add(question_id)
        try:
            section = self.schema.section_of(question_id)
            visible = (
                (section is None or self.is_section_shown(section))
                and self.conditions_show(question.conditions)
            )
        finally:
            self._in_progress.discard(question_id)
        self._visible[question_id] = visible
        return visible

    def visible(self, question: Question) -> bool:
        if self.schema is None:
            return self.conditions_show(question.conditions)
        return self.is_question_visible(question.id)
