"""Data models for the divorce forms system."""

from .document import GeneratedDocument
from .enums import (
    ConditionEffect,
    ConditionOperator,
    FieldKind,
    GenerationMode,
    QuestionType,
    ResponseStatus,
    ValidationKind,
)
from .mapping import FieldMappingEntry, FieldMappingTable, Transform, with_default
from .responses import (
    ResponseMap,
    ResponseValue,
    coerce_number,
    first_value,
    is_answered,
    normalize_responses,
    normalize_value,
    parse_date,
)
from .schema import (
    QUESTION_VARIANTS,
    AddressBlockQuestion,
    Condition,
    DateQuestion,
    HelpResource,
    LongTextQuestion,
    MultiChoiceQuestion,
    NumberQuestion,
    Option,
    Question,
    Schema,
    SchemaMetadata,
    Section,
    ShortTextQuestion,
    SingleChoiceQuestion,
    ValidationRule,
    YesNoQuestion,
    build_question,
    find_condition_cycles,
)

__all__ = [
    "GeneratedDocument",
    "ConditionEffect",
    "ConditionOperator",
    "FieldKind",
    "GenerationMode",
    "QuestionType",
    "ResponseStatus",
    "ValidationKind",
    "FieldMappingEntry",
    "FieldMappingTable",
    "Transform",
    "with_default",
    "ResponseMap",
    "ResponseValue",
    "coerce_number",
    "first_value",
    "is_answered",
    "normalize_responses",
    "normalize_value",
    "parse_date",
    "QUESTION_VARIANTS",
    "AddressBlockQuestion",
    "Condition",
    "DateQuestion",
    "HelpResource",
    "LongTextQuestion",
    "MultiChoiceQuestion",
    "NumberQuestion",
    "Option",
    "Question",
    "Schema",
    "SchemaMetadata",
    "Section",
    "ShortTextQuestion",
    "SingleChoiceQuestion",
    "ValidationRule",
    "YesNoQuestion",
    "build_question",
    "find_condition_cycles",
]
