"""Data models for configuration management."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.enums import QuestionType
from ..models.mapping import FieldMappingTable
from ..models.schema import Schema


class ConfigurationType(Enum):
    """Types of configuration supported by the system."""
    QUESTIONNAIRES = "questionnaires"
    MAPPING_TABLES = "mapping_tables"


# Type names used by older questionnaire content
LEGACY_QUESTION_TYPES = {
    "text": QuestionType.SHORT_TEXT,
    "email": QuestionType.SHORT_TEXT,
    "phone": QuestionType.SHORT_TEXT,
    "textarea": QuestionType.LONG_TEXT,
    "select": QuestionType.SINGLE_CHOICE,
    "radio": QuestionType.SINGLE_CHOICE,
    "checkbox": QuestionType.MULTI_CHOICE,
    "yesno": QuestionType.YES_NO,
    "address": QuestionType.ADDRESS_BLOCK,
}


@dataclass
class SystemConfiguration:
    """
    Complete system configuration.

    Aggregates loaded questionnaires and mapping tables.
    """
    schemas: Dict[str, Schema] = field(default_factory=dict)
    mapping_tables: Dict[str, FieldMappingTable] = field(default_factory=dict)
    version: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    def get_schema(self, schema_id: str) -> Optional[Schema]:
        return self.schemas.get(schema_id)

    def schema_ids(self) -> List[str]:
        return sorted(self.schemas)
