"""
Divorce Forms

Dynamic questionnaires and document generation for uncontested divorce
paperwork: official form filling and freeform settlement agreements.
"""

__version__ = "0.1.0"

# Export main components
from .models.enums import (
    ConditionEffect,
    ConditionOperator,
    FieldKind,
    GenerationMode,
    QuestionType,
    ResponseStatus,
    ValidationKind,
)
from .models.schema import Condition, Question, Schema, Section, ValidationRule
from .models.mapping import FieldMappingEntry, FieldMappingTable, Transform
from .models.document import GeneratedDocument
from .engine import (
    effective_required,
    evaluate,
    progress,
    validate_all,
    validate_question,
    visible_questions,
    visible_sections,
)
from .mappings import (
    FieldMappingRegistry,
    apply_mapping,
    compute_aggregates,
    default_registry,
    resolve_table,
)
from .generators import (
    FreeformComposer,
    PdfFormFiller,
    SettlementAgreementComposer,
    finalize,
)
from .pipeline import (
    DocumentGenerationPipeline,
    PipelineConfig,
    PipelineResult,
    PipelineStats,
    select_petition_type,
)
from .storage import DatabaseManager, ResponseStore, StoredResponses
from .config import (
    ConfigurationManager,
    ConfigurationType,
    SystemConfiguration,
    ConfigurationError,
    ValidationResult,
)
from .errors import (
    DivorceFormsError,
    DocumentGenerationError,
    PersistenceError,
    ResponseNotFoundError,
    SubmissionBlockedError,
    TemplateCorruptedError,
    TemplateFetchError,
    UnsupportedDocumentTypeError,
)

__all__ = [
    "ConditionEffect",
    "ConditionOperator",
    "FieldKind",
    "GenerationMode",
    "QuestionType",
    "ResponseStatus",
    "ValidationKind",
    "Condition",
    "Question",
    "Schema",
    "Section",
    "ValidationRule",
    "FieldMappingEntry",
    "FieldMappingTable",
    "Transform",
    "GeneratedDocument",
    "effective_required",
    "evaluate",
    "progress",
    "validate_all",
    "validate_question",
    "visible_questions",
    "visible_sections",
    "FieldMappingRegistry",
    "apply_mapping",
    "compute_aggregates",
    "default_registry",
    "resolve_table",
    "FreeformComposer",
    "PdfFormFiller",
    "SettlementAgreementComposer",
    "finalize",
    "DocumentGenerationPipeline",
    "PipelineConfig",
    "PipelineResult",
    "PipelineStats",
    "select_petition_type",
    "DatabaseManager",
    "ResponseStore",
    "StoredResponses",
    "ConfigurationManager",
    "ConfigurationType",
    "SystemConfiguration",
    "ConfigurationError",
    "ValidationResult",
    "DivorceFormsError",
    "DocumentGenerationError",
    "PersistenceError",
    "ResponseNotFoundError",
    "SubmissionBlockedError",
    "TemplateCorruptedError",
    "TemplateFetchError",
    "UnsupportedDocumentTypeError",
]
