"""Questionnaire schema model for the divorce forms system.

A schema is an ordered list of sections, each holding an ordered list of
questions. Questions are a closed set of variants, one per QuestionType;
``QUESTION_VARIANTS`` must cover every member of the enum.
"""

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, Iterator, List, Optional, Tuple, Type

from ..errors import ConfigurationError, ValidationResult
from .enums import ConditionEffect, ConditionOperator, QuestionType, ValidationKind
from .responses import ResponseValue, coerce_number, parse_date

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class Option:
    """A selectable value of a choice question."""
    value: str
    label: str


@dataclass(frozen=True)
class ValidationRule:
    """
    Per-question validation rule.

    ``value`` holds the threshold for min/max and the regex for pattern.
    ``message`` overrides the default message when set.
    """
    kind: ValidationKind
    value: Any = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Condition:
    """
    Conditional rule attached to a question or a section.

    The rule fires when ``operator`` holds between the answer stored for
    ``source_question_id`` and ``value``.
    """
    source_question_id: str
    operator: ConditionOperator
    value: Any = None
    effect: ConditionEffect = ConditionEffect.SHOW


@dataclass(frozen=True)
class Question:
    """
    Base question.

    Concrete questions are instances of one of the variants registered in
    ``QUESTION_VARIANTS``; the base class itself is never instantiated by
    the loader.
    """
    question_type: ClassVar[QuestionType]

    id: str
    label: str
    required: bool = False
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    default_value: Any = None
    options: Tuple[Option, ...] = ()
    validation_rules: Tuple[ValidationRule, ...] = ()
    conditions: Tuple[Condition, ...] = ()

    @property
    def type(self) -> QuestionType:
        return self.question_type

    def option_values(self) -> List[str]:
        return [option.value for option in self.options]

    def type_error(self, value: ResponseValue) -> Optional[str]:
        """
        Check that an answered value fits this question's type.

        Returns:
            An error message, or None when the value is acceptable.
        """
        raise NotImplementedError


@dataclass(frozen=True)
class ShortTextQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.SHORT_TEXT

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if isinstance(value, list):
            return f"{self.label} must be text"
        return None


@dataclass(frozen=True)
class LongTextQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.LONG_TEXT

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if isinstance(value, list):
            return f"{self.label} must be text"
        return None


@dataclass(frozen=True)
class NumberQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.NUMBER

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if coerce_number(value) is None:
            return f"{self.label} must be a number"
        return None


@dataclass(frozen=True)
class DateQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.DATE

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if parse_date(value) is None:
            return f"{self.label} must be a valid date"
        return None


@dataclass(frozen=True)
class SingleChoiceQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.SINGLE_CHOICE

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if isinstance(value, list):
            return f"{self.label} accepts a single selection"
        if self.options and str(value) not in self.option_values():
            return f"{self.label} must be one of the available options"
        return None


@dataclass(frozen=True)
class MultiChoiceQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.MULTI_CHOICE

    def type_error(self, value: ResponseValue) -> Optional[str]:
        selected = value if isinstance(value, list) else [str(value)]
        if self.options:
            allowed = self.option_values()
            if any(item not in allowed for item in selected):
                return f"{self.label} must only contain available options"
        return None


@dataclass(frozen=True)
class YesNoQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.YES_NO

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if isinstance(value, bool):
            return None
        if isinstance(value, str) and value.strip().lower() in ("yes", "no"):
            return None
        return f"{self.label} must be yes or no"


@dataclass(frozen=True)
class AddressBlockQuestion(Question):
    question_type: ClassVar[QuestionType] = QuestionType.ADDRESS_BLOCK

    def type_error(self, value: ResponseValue) -> Optional[str]:
        if not isinstance(value, str):
            return f"{self.label} must be an address"
        return None


QUESTION_VARIANTS: Dict[QuestionType, Type[Question]] = {
    variant.question_type: variant
    for variant in (
        ShortTextQuestion,
        LongTextQuestion,
        NumberQuestion,
        DateQuestion,
        SingleChoiceQuestion,
        MultiChoiceQuestion,
        YesNoQuestion,
        AddressBlockQuestion,
    )
}

_uncovered = set(QuestionType) - set(QUESTION_VARIANTS)
if _uncovered:
    raise TypeError(
        f"Question types without a variant: {sorted(t.value for t in _uncovered)}"
    )

CHOICE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE)


def build_question(question_type: QuestionType, **fields: Any) -> Question:
    """Instantiate the variant registered for ``question_type``."""
    return QUESTION_VARIANTS[question_type](**fields)


@dataclass(frozen=True)
class Section:
    """Ordered group of questions with optional show/hide conditions."""
    id: str
    title: str
    questions: Tuple[Question, ...] = ()
    description: Optional[str] = None
    conditions: Tuple[Condition, ...] = ()


@dataclass(frozen=True)
class HelpResource:
    """Link to supporting material shown alongside a questionnaire."""
    title: str
    url: str


@dataclass(frozen=True)
class SchemaMetadata:
    """Descriptive metadata of a questionnaire."""
    estimated_minutes: Optional[int] = None
    required_supporting_documents: Tuple[str, ...] = ()
    help_resources: Tuple[HelpResource, ...] = ()


@dataclass(frozen=True)
class Schema:
    """
    Complete questionnaire definition.

    Construction checks structure: unique ids, condition sources that
    exist, and section conditions limited to show/hide. Violations raise
    ConfigurationError. Conditional cycles are reported as warnings; the
    engine treats questions caught in one as hidden.
    """
    id: str
    name: str
    sections: Tuple[Section, ...] = ()
    description: Optional[str] = None
    metadata: SchemaMetadata = field(default_factory=SchemaMetadata)
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self):
        result = check_structure(self)
        if not result.is_valid:
            raise ConfigurationError(
                f"Questionnaire '{self.id}' is structurally invalid",
                validation_result=result
            )
        object.__setattr__(self, "warnings", tuple(result.warnings))
        questions: Dict[str, Question] = {}
        owners: Dict[str, Section] = {}
        for section in self.sections:
            for question in section.questions:
                questions[question.id] = question
                owners[question.id] = section
        object.__setattr__(self, "_questions", questions)
        object.__setattr__(self, "_owners", owners)
        object.__setattr__(
            self,
            "_cyclic",
            frozenset(qid for cycle in find_condition_cycles(self) for qid in cycle)
        )

    def questions(self) -> Iterator[Question]:
        """Iterate over all questions in schema order."""
        for section in self.sections:
            yield from section.questions

    def question(self, question_id: str) -> Optional[Question]:
        """Get a question by ID."""
        return self._questions.get(question_id)

    def section(self, section_id: str) -> Optional[Section]:
        """Get a section by ID."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_of(self, question_id: str) -> Optional[Section]:
        """Get the section that contains a question."""
        return self._owners.get(question_id)

    @property
    def question_ids(self) -> List[str]:
        return list(self._questions)

    @property
    def cyclic_question_ids(self) -> FrozenSet[str]:
        """Questions whose visibility depends on itself through conditions."""
        return self._cyclic


def _dependency_graph(schema: Schema) -> Dict[str, List[str]]:
    """Map each question id to the question ids its visibility reads."""
    graph: Dict[str, List[str]] = {}
    for section in schema.sections:
        section_sources = [
            c.source_question_id for c in section.conditions
            if c.effect in (ConditionEffect.SHOW, ConditionEffect.HIDE)
        ]
        for question in section.questions:
            own = [
                c.source_question_id for c in question.conditions
                if c.effect in (ConditionEffect.SHOW, ConditionEffect.HIDE)
            ]
            graph[question.id] = section_sources + own
    return graph


def find_condition_cycles(schema: Schema) -> List[List[str]]:
    """
    Find visibility dependency cycles.

    Returns:
        One list of question ids per cycle found, in dependency order.
    """
    graph = _dependency_graph(schema)
    cycles: List[List[str]] = []
    state: Dict[str, int] = {}
    stack: List[str] = []

    def visit(node: str) -> None:
        state[node] = 1
        stack.append(node)
        for source in graph.get(node, []):
            if source not in graph:
                continue
            if state.get(source) == 1:
                cycles.append(stack[stack.index(source):] + [source])
            elif source not in state:
                visit(source)
        stack.pop()
        state[node] = 2

    for node in graph:
        if node not in state:
            visit(node)
    return cycles


def check_structure(schema: Schema) -> ValidationResult:
    """Validate ids and condition references of a schema."""
    result = ValidationResult(is_valid=True)
    prefix = f"Questionnaire '{schema.id}'"

    section_ids = [s.id for s in schema.sections]
    duplicates = {sid for sid in section_ids if section_ids.count(sid) > 1}
    if duplicates:
        result.add_error(f"{prefix}: Duplicate section IDs found: {sorted(duplicates)}")

    question_ids = [q.id for s in schema.sections for q in s.questions]
    duplicates = {qid for qid in question_ids if question_ids.count(qid) > 1}
    if duplicates:
        result.add_error(f"{prefix}: Duplicate question IDs found: {sorted(duplicates)}")

    known = set(question_ids)
    for section in schema.sections:
        for condition in section.conditions:
            if condition.source_question_id not in known:
                result.add_error(
                    f"{prefix}: Section '{section.id}' condition references "
                    f"unknown question '{condition.source_question_id}'"
                )
            if condition.effect not in (ConditionEffect.SHOW, ConditionEffect.HIDE):
                result.add_error(
                    f"{prefix}: Section '{section.id}' conditions may only show or hide"
                )
        for question in section.questions:
            for condition in question.conditions:
                if condition.source_question_id not in known:
                    result.add_error(
                        f"{prefix}: Question '{question.id}' condition references "
                        f"unknown question '{condition.source_question_id}'"
                    )
            if question.type in CHOICE_TYPES and not question.options:
                result.add_warning(
                    f"{prefix}: Choice question '{question.id}' has no options"
                )
            for rule in question.validation_rules:
                _check_rule_value(rule, f"{prefix}: Question '{question.id}'", result)

    if result.is_valid:
        for cycle in find_condition_cycles(schema):
            result.add_warning(
                f"{prefix}: Conditional cycle {' -> '.join(cycle)}; "
                "questions in the cycle will stay hidden"
            )
    return result


def _check_rule_value(rule: ValidationRule, prefix: str, result: ValidationResult) -> None:
    """Validate the threshold or pattern carried by a validation rule."""
    if rule.kind in (ValidationKind.MIN, ValidationKind.MAX):
        if coerce_number(rule.value) is None:
            result.add_error(f"{prefix}: '{rule.kind.value}' rule needs a numeric value")
    elif rule.kind is ValidationKind.PATTERN:
        if not isinstance(rule.value, str) or not rule.value:
            result.add_error(f"{prefix}: 'pattern' rule needs a regex string")
        else:
            try:
                re.compile(rule.value)
            except re.error as e:
                result.add_error(f"{prefix}: 'pattern' is not a valid regex: {e}")
