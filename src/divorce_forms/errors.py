"""Exceptions and validation results for the divorce forms system.

Configuration errors are fatal at load time. External resource errors are
raised per operation and never retried here. User input errors are not
exceptions at all, except when they block a submission.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


class ConfigurationError(Exception):
    """Exception raised for defects in authored content (schemas, mapping tables)."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.message = message
        self.validation_result = validation_result

    def __str__(self) -> str:
        if self.validation_result and self.validation_result.errors:
            return f"{self.message}: " + "; ".join(self.validation_result.errors)
        return self.message


@dataclass
class DivorceFormsError(Exception):
    """
    Base exception for runtime failures.

    Attributes:
        message: Human-readable error description.
        document_type: Document type the failing operation worked on.
        details: Additional error details.
    """
    message: str
    document_type: Optional[str] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.message]
        if self.document_type:
            parts.append(f"Document type: {self.document_type}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "document_type": self.document_type,
            "details": self.details,
        }


@dataclass
class UnsupportedDocumentTypeError(DivorceFormsError):
    """Raised when no mapping table or composer exists for a document type."""

    def get_supported_types(self) -> List[str]:
        """Return the document types that were available when this was raised."""
        return list(self.details.get("supported_types", []))


@dataclass
class TemplateFetchError(DivorceFormsError):
    """
    Raised when template bytes cannot be acquired.

    Fatal for the single generation request only.
    """
    path: Optional[str] = None

    def __str__(self) -> str:
        text = super().__str__()
        if self.path:
            text += f" | Path: {self.path}"
        return text


@dataclass
class TemplateCorruptedError(TemplateFetchError):
    """Raised when template bytes are not a readable PDF."""


@dataclass
class DocumentGenerationError(DivorceFormsError):
    """Raised when a single document generation request fails."""
    retryable: bool = True


@dataclass
class PersistenceError(DivorceFormsError):
    """Raised when the response store cannot read or write."""


@dataclass
class ResponseNotFoundError(PersistenceError):
    """Raised when no stored responses exist for a user and questionnaire."""


@dataclass
class SubmissionBlockedError(DivorceFormsError):
    """
    Raised when a submission fails questionnaire validation.

    Saving a draft never raises this; only submitting does.
    """
    errors_by_question: Dict[str, List[str]] = field(default_factory=dict)
    first_failing_question: Optional[str] = None

    def __post_init__(self):
        if self.errors_by_question is None:
            self.errors_by_question = {}
        super().__post_init__()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors_by_question
        data["first_failing_question"] = self.first_failing_question
        return data
