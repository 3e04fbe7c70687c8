"""Configuration Manager implementation for the divorce forms system.

This module loads and validates questionnaire schemas and field mapping
table definitions. Sources may be JSON file paths, dictionaries or lists of
dictionaries. Every item is validated before anything is applied; a single
invalid item fails the whole load with the accumulated errors.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..engine.rules import parse_operator
from ..errors import ConfigurationError, UnsupportedDocumentTypeError, ValidationResult
from ..mappings.registry import FieldMappingRegistry
from ..mappings.transforms import get_transform
from ..models.enums import ConditionEffect, FieldKind, QuestionType, ValidationKind
from ..models.mapping import FieldMappingEntry, FieldMappingTable, with_default
from ..models.schema import (
    Condition,
    HelpResource,
    Option,
    Question,
    Schema,
    SchemaMetadata,
    Section,
    ValidationRule,
    build_question,
)
from .models import LEGACY_QUESTION_TYPES, SystemConfiguration

logger = logging.getLogger(__name__)

BUILTIN_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "data" / "questionnaires"

Source = Union[str, Path, Dict[str, Any], List[Dict[str, Any]]]


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Read the first present key, so camelCase content loads too."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ConfigurationManager:
    """
    Manager for questionnaire and mapping configuration.

    Handles loading, validation, and access to questionnaire schemas and
    field mapping tables.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional directory holding ``questionnaires`` JSON
                files and a ``mappings.json`` file.
        """
        self._config_dir = Path(config_dir) if config_dir else None
        self._configuration = SystemConfiguration()
        self._is_loaded = False

    @property
    def configuration(self) -> SystemConfiguration:
        """Get the current system configuration."""
        return self._configuration

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._is_loaded

    # =========================================================================
    # Questionnaire Methods
    # =========================================================================

    def load_questionnaires(self, source: Source) -> ValidationResult:
        """
        Load and validate questionnaire schemas.

        Supports loading from:
        - JSON file path
        - Dictionary with a ``questionnaires`` list, or one questionnaire
        - List of questionnaire dictionaries

        Args:
            source: File path, dictionary, or list of dictionaries.

        Returns:
            ValidationResult with any warnings (such as conditional cycles).

        Raises:
            ConfigurationError: If any questionnaire is invalid.
        """
        raw_data = self._parse_source(source)

        if isinstance(raw_data, dict):
            if "questionnaires" in raw_data:
                items = raw_data["questionnaires"]
            else:
                items = [raw_data]
        else:
            items = raw_data

        result = ValidationResult(is_valid=True)
        schemas: List[Schema] = []

        for i, item in enumerate(items):
            item_result, schema = self._validate_questionnaire(item, index=i)
            result = result.merge(item_result)
            if schema:
                schemas.append(schema)

        # Check for duplicate IDs
        ids = [s.id for s in schemas]
        duplicates = [id for id in ids if ids.count(id) > 1]
        if duplicates:
            result.add_error(f"Duplicate questionnaire IDs found: {set(duplicates)}")

        if not result.is_valid:
            raise ConfigurationError(
                "Questionnaire validation failed",
                validation_result=result
            )

        for schema in schemas:
            self._configuration.schemas[schema.id] = schema
        self._is_loaded = True
        for warning in result.warnings:
            logger.warning(warning)
        logger.info(f"Loaded {len(schemas)} questionnaire(s)")

        return result

    def load_builtin_schemas(self) -> ValidationResult:
        """Load the questionnaires shipped with the package."""
        result = ValidationResult(is_valid=True)
        for path in sorted(BUILTIN_SCHEMA_DIR.glob("*.json")):
            result = result.merge(self.load_questionnaires(path))
        return result

    def _validate_questionnaire(
        self,
        data: Dict[str, Any],
        index: int = 0
    ) -> Tuple[ValidationResult, Optional[Schema]]:
        """Validate a single questionnaire dictionary."""
        result = ValidationResult(is_valid=True)
        prefix = f"Questionnaire [{index}]"

        if not isinstance(data, dict):
            result.add_error(f"{prefix}: must be an object")
            return result, None

        for field in ("id", "name", "sections"):
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")
        if not result.is_valid:
            return result, None

        if not _non_empty_string(data["id"]):
            result.add_error(f"{prefix}: 'id' must be a non-empty string")
        if not _non_empty_string(data["name"]):
            result.add_error(f"{prefix}: 'name' must be a non-empty string")
        if not isinstance(data["sections"], list):
            result.add_error(f"{prefix}: 'sections' must be a list")
        if not result.is_valid:
            return result, None

        prefix = f"Questionnaire '{data['id']}'"
        sections: List[Section] = []
        for i, section_data in enumerate(data["sections"]):
            section_result, section = self._validate_section(section_data, prefix, i)
            result = result.merge(section_result)
            if section:
                sections.append(section)

        metadata_result, metadata = self._validate_metadata(data.get("metadata") or {}, prefix)
        result = result.merge(metadata_result)
        if not result.is_valid:
            return result, None

        try:
            schema = Schema(
                id=data["id"].strip(),
                name=data["name"].strip(),
                sections=tuple(sections),
                description=data.get("description"),
                metadata=metadata,
            )
        except ConfigurationError as e:
            if e.validation_result is not None:
                return result.merge(e.validation_result), None
            result.add_error(f"{prefix}: {e.message}")
            return result, None

        for warning in schema.warnings:
            result.add_warning(warning)
        return result, schema

    def _validate_section(
        self,
        data: Dict[str, Any],
        prefix: str,
        index: int
    ) -> Tuple[ValidationResult, Optional[Section]]:
        result = ValidationResult(is_valid=True)
        section_prefix = f"{prefix}: Section [{index}]"

        for field in ("id", "title", "questions"):
            if field not in data:
                result.add_error(f"{section_prefix}: Missing required field '{field}'")
        if not result.is_valid:
            return result, None
        if not isinstance(data["questions"], list):
            result.add_error(f"{section_prefix}: 'questions' must be a list")
            return result, None

        questions: List[Question] = []
        for i, question_data in enumerate(data["questions"]):
            question_result, question = self._validate_question(
                question_data, f"{section_prefix}: Question [{i}]"
            )
            result = result.merge(question_result)
            if question:
                questions.append(question)

        conditions_result, conditions = self._validate_conditions(data, section_prefix)
        result = result.merge(conditions_result)
        if not result.is_valid:
            return result, None

        return result, Section(
            id=str(data["id"]).strip(),
            title=str(data["title"]).strip(),
            questions=tuple(questions),
            description=data.get("description"),
            conditions=conditions,
        )

    def _validate_question(
        self,
        data: Dict[str, Any],
        prefix: str
    ) -> Tuple[ValidationResult, Optional[Question]]:
        """Validate a single question dictionary."""
        result = ValidationResult(is_valid=True)

        for field in ("id", "type", "label"):
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")
        if not result.is_valid:
            return result, None

        if not _non_empty_string(data["id"]):
            result.add_error(f"{prefix}: 'id' must be a non-empty string")
            return result, None
        prefix = f"{prefix} '{data['id']}'"

        type_name = data["type"]
        if type_name in LEGACY_QUESTION_TYPES:
            question_type = LEGACY_QUESTION_TYPES[type_name]
        else:
            try:
                question_type = QuestionType(type_name)
            except ValueError:
                result.add_error(f"{prefix}: Unknown question type '{type_name}'")
                return result, None

        options: List[Option] = []
        for option in data.get("options") or []:
            if not isinstance(option, dict) or "value" not in option:
                result.add_error(f"{prefix}: Options must be objects with a 'value'")
                continue
            value = str(option["value"])
            options.append(Option(value=value, label=str(option.get("label", value))))

        rules: List[ValidationRule] = []
        for rule in _first(data, "validation_rules", "validation", default=[]) or []:
            kind_name = _first(rule, "kind", "type") if isinstance(rule, dict) else None
            try:
                kind = ValidationKind(kind_name)
            except ValueError:
                result.add_error(f"{prefix}: Unknown validation rule kind '{kind_name}'")
                continue
            rules.append(ValidationRule(kind=kind, value=rule.get("value"), message=rule.get("message")))
        if type_name == "email" and not any(r.kind is ValidationKind.EMAIL for r in rules):
            rules.append(ValidationRule(kind=ValidationKind.EMAIL))

        conditions_result, conditions = self._validate_conditions(data, prefix)
        result = result.merge(conditions_result)
        if not result.is_valid:
            return result, None

        question = build_question(
            question_type,
            id=data["id"].strip(),
            label=str(data["label"]),
            required=bool(data.get("required", False)),
            placeholder=data.get("placeholder"),
            help_text=_first(data, "help_text", "helpText"),
            default_value=_first(data, "default_value", "defaultValue"),
            options=tuple(options),
            validation_rules=tuple(rules),
            conditions=conditions,
        )
        return result, question

    def _validate_conditions(
        self,
        data: Dict[str, Any],
        prefix: str
    ) -> Tuple[ValidationResult, Tuple[Condition, ...]]:
        result = ValidationResult(is_valid=True)
        conditions: List[Condition] = []
        raw = _first(data, "conditions", "conditionalLogic", default=[]) or []

        for i, item in enumerate(raw):
            if not isinstance(item, dict):
                result.add_error(f"{prefix}: Condition [{i}] must be an object")
                continue
            source = _first(item, "source_question_id", "field")
            if not _non_empty_string(source):
                result.add_error(f"{prefix}: Condition [{i}] needs a source question")
                continue
            try:
                operator = parse_operator(item.get("operator", "equals"))
            except ValueError:
                result.add_error(
                    f"{prefix}: Condition [{i}] has unknown operator '{item.get('operator')}'"
                )
                continue
            effect_name = _first(item, "effect", "action", default="show")
            try:
                effect = ConditionEffect(effect_name)
            except ValueError:
                result.add_error(f"{prefix}: Condition [{i}] has unknown effect '{effect_name}'")
                continue
            conditions.append(Condition(
                source_question_id=source.strip(),
                operator=operator,
                value=item.get("value"),
                effect=effect,
            ))

        return result, tuple(conditions)

    def _validate_metadata(
        self,
        data: Dict[str, Any],
        prefix: str
    ) -> Tuple[ValidationResult, SchemaMetadata]:
        result = ValidationResult(is_valid=True)
        minutes = _first(data, "estimated_minutes", "estimatedTime")
        if minutes is not None and (not isinstance(minutes, int) or minutes < 0):
            result.add_error(f"{prefix}: 'estimated_minutes' must be a non-negative integer")
            minutes = None

        documents = _first(data, "required_supporting_documents", "requiredDocuments", default=[])
        resources: List[HelpResource] = []
        for resource in _first(data, "help_resources", "helpResources", default=[]) or []:
            if not isinstance(resource, dict) or "title" not in resource or "url" not in resource:
                result.add_error(f"{prefix}: Help resources need a 'title' and a 'url'")
                continue
            resources.append(HelpResource(title=resource["title"], url=resource["url"]))

        return result, SchemaMetadata(
            estimated_minutes=minutes,
            required_supporting_documents=tuple(str(d) for d in documents or []),
            help_resources=tuple(resources),
        )

    def get_schema(self, schema_id: str) -> Optional[Schema]:
        """Get a loaded questionnaire by ID."""
        return self._configuration.get_schema(schema_id)

    # =========================================================================
    # Mapping Table Methods
    # =========================================================================

    def load_mapping_tables(
        self,
        source: Source,
        registry: Optional[FieldMappingRegistry] = None
    ) -> ValidationResult:
        """
        Load and validate field mapping table definitions.

        A table may name another table in ``extends``; its entries are
        appended after the base table's. The base is looked up among tables
        loaded earlier in the same source, then in ``registry``.

        Args:
            source: File path, dictionary, or list of dictionaries.
            registry: Registry to resolve bases from and to register the
                loaded tables into.

        Returns:
            ValidationResult indicating success.

        Raises:
            ConfigurationError: If any table definition is invalid.
        """
        raw_data = self._parse_source(source)

        if isinstance(raw_data, dict):
            if "tables" in raw_data:
                items = raw_data["tables"]
            else:
                items = [raw_data]
        else:
            items = raw_data

        result = ValidationResult(is_valid=True)
        tables: Dict[str, FieldMappingTable] = {}

        for i, item in enumerate(items):
            table_result, table = self._validate_mapping_table(item, i, tables, registry)
            result = result.merge(table_result)
            if table:
                if table.document_type in tables:
                    result.add_error(
                        f"Duplicate mapping table document types found: {table.document_type}"
                    )
                tables[table.document_type] = table

        if not result.is_valid:
            raise ConfigurationError(
                "Mapping table validation failed",
                validation_result=result
            )

        self._configuration.mapping_tables.update(tables)
        if registry is not None:
            for table in tables.values():
                registry.register_table(table)
        self._is_loaded = True
        logger.info(f"Loaded {len(tables)} mapping table(s)")

        return result

    def _validate_mapping_table(
        self,
        data: Dict[str, Any],
        index: int,
        loaded: Dict[str, FieldMappingTable],
        registry: Optional[FieldMappingRegistry]
    ) -> Tuple[ValidationResult, Optional[FieldMappingTable]]:
        """Validate a single mapping table dictionary."""
        result = ValidationResult(is_valid=True)
        prefix = f"Mapping table [{index}]"

        for field in ("document_type", "entries"):
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")
        if not result.is_valid:
            return result, None
        if not _non_empty_string(data["document_type"]):
            result.add_error(f"{prefix}: 'document_type' must be a non-empty string")
            return result, None

        base: Optional[FieldMappingTable] = None
        extends = data.get("extends")
        if extends:
            base = loaded.get(extends)
            if base is None and registry is not None:
                try:
                    base = registry.resolve_table(extends)
                except UnsupportedDocumentTypeError:
                    base = None
            if base is None:
                result.add_error(f"{prefix}: Unknown base table '{extends}'")

        entries: List[FieldMappingEntry] = []
        for i, entry_data in enumerate(data["entries"]):
            entry_result, entry = self._validate_mapping_entry(entry_data, f"{prefix}: Entry [{i}]")
            result = result.merge(entry_result)
            if entry:
                entries.append(entry)

        if not result.is_valid:
            return result, None

        document_type = data["document_type"].strip()
        try:
            if base is not None:
                table = base.extend(document_type, entries)
            else:
                table = FieldMappingTable(document_type, tuple(entries))
        except ConfigurationError as e:
            if e.validation_result is not None:
                return result.merge(e.validation_result), None
            result.add_error(f"{prefix}: {e.message}")
            return result, None

        return result, table

    def _validate_mapping_entry(
        self,
        data: Dict[str, Any],
        prefix: str
    ) -> Tuple[ValidationResult, Optional[FieldMappingEntry]]:
        result = ValidationResult(is_valid=True)

        for field in ("source_key", "destination_field"):
            if not _non_empty_string(data.get(field)):
                result.add_error(f"{prefix}: Missing required field '{field}'")
        if not result.is_valid:
            return result, None

        try:
            kind = FieldKind(data.get("field_kind", "text"))
        except ValueError:
            result.add_error(f"{prefix}: Unknown field kind '{data.get('field_kind')}'")
            return result, None

        transform = None
        if data.get("transform"):
            try:
                transform = get_transform(data["transform"])
            except KeyError:
                result.add_error(f"{prefix}: Unknown transform '{data['transform']}'")
                return result, None
            if data.get("default") is not None:
                transform = with_default(transform, str(data["default"]))

        return result, FieldMappingEntry(
            source_key=data["source_key"].strip(),
            destination_field=data["destination_field"].strip(),
            field_kind=kind,
            transform=transform,
            section_tag=data.get("section_tag"),
        )

    def get_mapping_table(self, document_type: str) -> Optional[FieldMappingTable]:
        """Get a loaded mapping table by document type."""
        return self._configuration.mapping_tables.get(document_type)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _parse_source(self, source: Source) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

        return source

    def load_from_directory(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        registry: Optional[FieldMappingRegistry] = None
    ) -> ValidationResult:
        """
        Load all configuration files from a directory.

        Expects:
        - questionnaires/*.json
        - mappings.json

        Args:
            config_dir: Directory containing configuration files. Uses the
                manager's directory if None.
            registry: Registry the loaded mapping tables are registered into.

        Returns:
            Combined ValidationResult for all loaded configurations.
        """
        config_dir = Path(config_dir) if config_dir else self._config_dir
        if not config_dir:
            raise ConfigurationError("No configuration directory specified")

        result = ValidationResult(is_valid=True)

        for path in sorted((config_dir / "questionnaires").glob("*.json")):
            try:
                result = result.merge(self.load_questionnaires(path))
            except ConfigurationError as e:
                result.add_error(f"Questionnaire loading failed for {path.name}: {e.message}")
                if e.validation_result:
                    result = result.merge(e.validation_result)

        mappings_file = config_dir / "mappings.json"
        if mappings_file.exists():
            try:
                result = result.merge(self.load_mapping_tables(mappings_file, registry))
            except ConfigurationError as e:
                result.add_error(f"Mapping table loading failed: {e.message}")
                if e.validation_result:
                    result = result.merge(e.validation_result)

        return result

    def reset(self) -> None:
        """Reset configuration to empty state."""
        self._configuration = SystemConfiguration()
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export a summary of the current configuration."""
        return {
            "version": self._configuration.version,
            "questionnaires": [
                {
                    "id": schema.id,
                    "name": schema.name,
                    "sections": len(schema.sections),
                    "questions": len(schema.question_ids),
                }
                for schema in self._configuration.schemas.values()
            ],
            "mapping_tables": {
                document_type: table.destination_fields()
                for document_type, table in self._configuration.mapping_tables.items()
            },
        }
