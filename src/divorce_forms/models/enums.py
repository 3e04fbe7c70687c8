"""Enumeration types for the divorce forms system."""

from enum import Enum


class QuestionType(Enum):
    """Closed set of question types a questionnaire can contain."""
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    NUMBER = "number"
    DATE = "date"
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    YES_NO = "yes-no"
    ADDRESS_BLOCK = "address-block"


class ConditionOperator(Enum):
    """Operators understood by the rule evaluator."""
    EQUALS = "equals"
    NOT_EQUALS = "not-equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater-than"
    LESS_THAN = "less-than"
    IS_EMPTY = "is-empty"
    IS_NOT_EMPTY = "is-not-empty"
    IN = "in"


class ConditionEffect(Enum):
    """What a firing condition does to its target."""
    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"
    RELAX = "relax"


class ValidationKind(Enum):
    """Kinds of per-question validation rules."""
    REQUIRED = "required"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    EMAIL = "email"
    DATE = "date"


class FieldKind(Enum):
    """Kind of a destination field inside a fillable template."""
    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    NUMBER = "number"

    @property
    def is_button(self) -> bool:
        """Checkboxes and radio groups are written as button states."""
        return self in (FieldKind.CHECKBOX, FieldKind.RADIO)


class ResponseStatus(Enum):
    """Lifecycle status of a stored response set."""
    DRAFT = "draft"
    COMPLETED = "completed"


class GenerationMode(Enum):
    """
    How a document is produced.

    OFFICIAL fills the court's fillable template; SUMMARY composes a
    readable overview instead. FREEFORM documents have no official form
    and are composed whatever mode was requested.
    """
    OFFICIAL = "official"
    FREEFORM = "freeform"
    SUMMARY = "summary"
