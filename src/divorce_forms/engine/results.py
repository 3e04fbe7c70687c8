"""Result models returned by the questionnaire engine.

All results are derived values recomputed on every call; none of them is
stored independently of the schema and response snapshot they came from.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class QuestionValidation:
    """Validation outcome of a single question."""
    question_id: str
    errors: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.errors is None:
            self.errors = []

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class QuestionnaireValidation:
    """
    Validation outcome of a whole response snapshot.

    ``errors_by_question`` only holds questions that failed, in schema
    order; ``first_failing_question`` is the first of them.
    """
    valid: bool
    errors_by_question: Dict[str, List[str]] = field(default_factory=dict)
    first_failing_question: Optional[str] = None

    def __post_init__(self):
        if self.errors_by_question is None:
            self.errors_by_question = {}

    def errors_for(self, question_id: str) -> List[str]:
        return list(self.errors_by_question.get(question_id, []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": {qid: list(msgs) for qid, msgs in self.errors_by_question.items()},
            "first_failing_question": self.first_failing_question,
        }


@dataclass
class SectionProgress:
    """Completion of one visible section."""
    section_id: str
    complete: bool
    answered_required: int = 0
    total_required: int = 0


@dataclass
class Progress:
    """
    Completion of a response snapshot.

    Attributes:
        progress_percentage: Integer 0..100; 100 when nothing is required.
        sections: Per-section completion for visible sections, schema order.
        answered_required: Visible, effectively required questions answered.
        total_required: Visible, effectively required questions.
    """
    progress_percentage: int
    sections: List[SectionProgress] = field(default_factory=list)
    answered_required: int = 0
    total_required: int = 0

    def __post_init__(self):
        if self.sections is None:
            self.sections = []

    @property
    def is_complete(self) -> bool:
        return self.answered_required == self.total_required

    def to_dict(self) -> Dict[str, Any]:
        return {
            "progress_percentage": self.progress_percentage,
            "answered_required": self.answered_required,
            "total_required": self.total_required,
            "sections": [
                {
                    "section_id": s.section_id,
                    "complete": s.complete,
                    "answered_required": s.answered_required,
                    "total_required": s.total_required,
                }
                for s in self.sections
            ],
        }


@dataclass
class QuestionnaireSnapshot:
    """Everything a caller needs to render one state of a questionnaire."""
    schema_id: str
    visible_sections: List[str] = field(default_factory=list)
    visible_questions: Dict[str, List[str]] = field(default_factory=dict)
    required_questions: List[str] = field(default_factory=list)
    validation: Optional[QuestionnaireValidation] = None
    progress: Optional[Progress] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_id": self.schema_id,
            "visible_sections": list(self.visible_sections),
            "visible_questions": {k: list(v) for k, v in self.visible_questions.items()},
            "required_questions": list(self.required_questions),
            "validation": self.validation.to_dict() if self.validation else None,
            "progress": self.progress.to_dict() if self.progress else None,
        }
