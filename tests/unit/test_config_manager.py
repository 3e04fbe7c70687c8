"""Unit tests for the Configuration Manager."""

import json

import pytest

from divorce_forms.config import (
    ConfigurationError,
    ConfigurationManager,
    ValidationResult,
)
from divorce_forms.engine import progress, validate_all, visible_sections
from divorce_forms.mappings import FieldMappingRegistry, apply_mapping
from divorce_forms.models import (
    ConditionEffect,
    ConditionOperator,
    FieldKind,
    QuestionType,
    ValidationKind,
)


def questionnaire(**overrides):
    data = {
        "id": "intake",
        "name": "Intake",
        "sections": [
            {
                "id": "about",
                "title": "About You",
                "questions": [
                    {"id": "full-name", "type": "short-text", "label": "Full Name", "required": True},
                    {"id": "married", "type": "yes-no", "label": "Married?"},
                    {
                        "id": "marriage-date",
                        "type": "date",
                        "label": "Marriage Date",
                        "conditions": [
                            {
                                "source_question_id": "married",
                                "operator": "equals",
                                "value": "yes",
                                "effect": "show",
                            }
                        ],
                    },
                ],
            }
        ],
    }
    data.update(overrides)
    return data


class TestQuestionnaireLoading:
    """Tests for questionnaire schema loading."""

    def test_load_from_dict(self):
        """Test loading a single questionnaire dictionary."""
        manager = ConfigurationManager()

        result = manager.load_questionnaires(questionnaire())

        assert result.is_valid
        assert manager.is_loaded
        schema = manager.get_schema("intake")
        assert schema.name == "Intake"
        assert schema.question_ids == ["full-name", "married", "marriage-date"]
        condition = schema.question("marriage-date").conditions[0]
        assert condition.operator is ConditionOperator.EQUALS
        assert condition.effect is ConditionEffect.SHOW

    def test_load_from_list_and_wrapper(self):
        """Test loading from a list and from a 'questionnaires' wrapper."""
        manager = ConfigurationManager()

        manager.load_questionnaires([questionnaire(id="one"), questionnaire(id="two")])
        manager.load_questionnaires({"questionnaires": [questionnaire(id="three")]})

        assert manager.configuration.schema_ids() == ["one", "three", "two"]

    def test_load_from_file(self, tmp_path):
        """Test loading from a JSON file."""
        path = tmp_path / "intake.json"
        path.write_text(json.dumps(questionnaire()), encoding="utf-8")
        manager = ConfigurationManager()

        manager.load_questionnaires(path)

        assert manager.get_schema("intake") is not None

    def test_missing_file(self, tmp_path):
        manager = ConfigurationManager()
        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_questionnaires(tmp_path / "nope.json")
        assert "not found" in exc_info.value.message

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager().load_questionnaires(path)
        assert "Invalid JSON" in exc_info.value.message

    def test_missing_required_fields(self):
        """Test validation fails for missing required fields."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_questionnaires({"id": "x", "sections": []})

        assert "Missing required field 'name'" in str(exc_info.value.validation_result.errors)
        assert manager.get_schema("x") is None

    def test_duplicate_ids(self):
        """Test validation fails for duplicate questionnaire IDs."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_questionnaires([questionnaire(), questionnaire()])

        assert "Duplicate questionnaire IDs" in str(exc_info.value.validation_result.errors)

    def test_unknown_question_type(self):
        data = questionnaire()
        data["sections"][0]["questions"].append({"id": "sig", "type": "signature", "label": "Sign"})

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager().load_questionnaires(data)

        assert "Unknown question type 'signature'" in str(exc_info.value)

    def test_unknown_operator_and_effect(self):
        data = questionnaire()
        conditions = data["sections"][0]["questions"][2]["conditions"]
        conditions.append({"source_question_id": "married", "operator": "roughly", "value": "yes"})
        conditions.append({"source_question_id": "married", "operator": "equals", "effect": "blink"})

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager().load_questionnaires(data)

        errors = exc_info.value.validation_result.errors
        assert any("unknown operator 'roughly'" in e for e in errors)
        assert any("unknown effect 'blink'" in e for e in errors)

    def test_condition_on_unknown_question(self):
        data = questionnaire()
        data["sections"][0]["questions"][2]["conditions"][0]["source_question_id"] = "spouse"

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager().load_questionnaires(data)

        assert "unknown question 'spouse'" in str(exc_info.value)

    def test_bad_rule_threshold(self):
        data = questionnaire()
        data["sections"][0]["questions"][0]["validation_rules"] = [{"kind": "min", "value": "lots"}]

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager().load_questionnaires(data)

        assert "needs a numeric value" in str(exc_info.value)

    def test_cycle_is_a_warning(self):
        data = questionnaire()
        questions = data["sections"][0]["questions"]
        questions[1]["conditions"] = [
            {"source_question_id": "marriage-date", "operator": "is-not-empty"}
        ]

        result = ConfigurationManager().load_questionnaires(data)

        assert result.is_valid
        assert any("Conditional cycle" in w for w in result.warnings)

    def test_nothing_applied_when_one_item_fails(self):
        manager = ConfigurationManager()
        bad = questionnaire(id="bad")
        bad["sections"][0]["questions"][0]["type"] = "signature"

        with pytest.raises(ConfigurationError):
            manager.load_questionnaires([questionnaire(id="good"), bad])

        assert manager.get_schema("good") is None


class TestLegacyQuestionnaireFormat:
    """Tests for content written with the older type names and camelCase keys."""

    def test_legacy_keys(self):
        data = {
            "id": "legacy",
            "name": "Legacy",
            "sections": [
                {
                    "id": "contact",
                    "title": "Contact",
                    "questions": [
                        {"id": "email", "type": "email", "label": "Email", "helpText": "We never share it"},
                        {"id": "kids", "type": "yesno", "label": "Kids?"},
                        {
                            "id": "kid-count",
                            "type": "select",
                            "label": "How many",
                            "options": [{"value": "1", "label": "One"}, {"value": "2"}],
                            "conditionalLogic": [
                                {"field": "kids", "operator": "notEquals", "value": "no", "action": "show"}
                            ],
                            "validation": [{"type": "required", "message": "Pick one"}],
                        },
                    ],
                }
            ],
            "metadata": {"estimatedTime": 15, "requiredDocuments": ["Tax returns"]},
        }
        manager = ConfigurationManager()

        manager.load_questionnaires(data)

        schema = manager.get_schema("legacy")
        email = schema.question("email")
        assert email.type is QuestionType.SHORT_TEXT
        assert email.help_text == "We never share it"
        assert [r.kind for r in email.validation_rules] == [ValidationKind.EMAIL]
        assert schema.question("kids").type is QuestionType.YES_NO

        count = schema.question("kid-count")
        assert count.type is QuestionType.SINGLE_CHOICE
        assert count.option_values() == ["1", "2"]
        assert count.options[1].label == "2"
        assert count.conditions[0].operator is ConditionOperator.NOT_EQUALS
        assert count.validation_rules[0].message == "Pick one"

        assert schema.metadata.estimated_minutes == 15
        assert schema.metadata.required_supporting_documents == ("Tax returns",)


class TestBuiltinSchemas:
    """Tests for the questionnaires shipped with the package."""

    @pytest.fixture
    def manager(self):
        manager = ConfigurationManager()
        manager.load_builtin_schemas()
        return manager

    def test_builtin_ids(self, manager):
        assert manager.configuration.schema_ids() == ["marital-settlement", "petition"]

    def test_petition_children_branch(self, manager):
        schema = manager.get_schema("petition")
        without = [s.id for s in visible_sections(schema, {"has-children": "no"})]
        with_children = [s.id for s in visible_sections(schema, {"has-children": "yes"})]

        assert "number-of-children" in schema.question_ids
        assert len(with_children) >= len(without)
        result = validate_all(schema, {"has-children": "yes"})
        assert "number-of-children" in result.errors_by_question

    def test_settlement_child_support_section(self, manager):
        schema = manager.get_schema("marital-settlement")
        assert "child-support" not in [s.id for s in visible_sections(schema, {"has-children": "no"})]
        assert "child-support" in [s.id for s in visible_sections(schema, {"has-children": "yes"})]

    def test_settlement_buyout_requires_amount(self, manager):
        schema = manager.get_schema("marital-settlement")
        responses = {"has-marital-home": "yes", "marital-home-disposition": "buyout"}

        result = validate_all(schema, responses)

        assert "home-buyout-amount" in result.errors_by_question

    def test_settlement_maintenance_amount(self, manager):
        schema = manager.get_schema("marital-settlement")

        paying = validate_all(schema, {"maintenance-agreement": "petitioner_pays"})
        waived = validate_all(schema, {"maintenance-agreement": "none"})

        assert "maintenance-amount" in paying.errors_by_question
        assert "maintenance-amount" not in waived.errors_by_question

    def test_empty_settlement_progress(self, manager):
        schema = manager.get_schema("marital-settlement")
        assert progress(schema, {}).progress_percentage == 0


class TestMappingTableLoading:
    """Tests for mapping table definitions."""

    def test_load_table(self):
        manager = ConfigurationManager()
        registry = FieldMappingRegistry(tables=[])
        data = {
            "tables": [
                {
                    "document_type": "cover-sheet",
                    "entries": [
                        {"source_key": "full-name", "destination_field": "Name"},
                        {
                            "source_key": "filing-fee",
                            "destination_field": "Fee",
                            "transform": "currency",
                        },
                        {
                            "source_key": "has-children",
                            "destination_field": "ChildrenBox",
                            "field_kind": "checkbox",
                            "transform": "yes_no",
                            "default": "No",
                        },
                    ],
                }
            ]
        }

        result = manager.load_mapping_tables(data, registry)

        assert result.is_valid
        table = registry.resolve_table("cover-sheet")
        assert table.destination_fields() == ["Name", "Fee", "ChildrenBox"]
        assert table.field_kinds()["ChildrenBox"] is FieldKind.CHECKBOX
        assert apply_mapping(table, {"full-name": "Jane Doe", "filing-fee": "388"}) == {
            "Name": "Jane Doe",
            "Fee": "$388.00",
            "ChildrenBox": "No",
        }
        assert manager.get_mapping_table("cover-sheet") is table

    def test_extends_builtin_table(self):
        manager = ConfigurationManager()
        registry = FieldMappingRegistry()
        base = registry.resolve_table("petition-no-children")

        manager.load_mapping_tables(
            {
                "document_type": "petition-cook-county",
                "extends": "petition-no-children",
                "entries": [{"source_key": "courtroom", "destination_field": "Courtroom"}],
            },
            registry,
        )

        table = registry.resolve_table("petition-cook-county")
        assert table.destination_fields() == base.destination_fields() + ["Courtroom"]

    def test_extends_earlier_table_in_same_source(self):
        manager = ConfigurationManager()

        manager.load_mapping_tables([
            {"document_type": "base", "entries": [{"source_key": "a", "destination_field": "A"}]},
            {
                "document_type": "child",
                "extends": "base",
                "entries": [{"source_key": "b", "destination_field": "B"}],
            },
        ])

        assert manager.get_mapping_table("child").destination_fields() == ["A", "B"]

    def test_unknown_base_and_transform(self):
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_mapping_tables({
                "document_type": "x",
                "extends": "nowhere",
                "entries": [{"source_key": "a", "destination_field": "A", "transform": "shout"}],
            })

        errors = exc_info.value.validation_result.errors
        assert any("Unknown base table 'nowhere'" in e for e in errors)
        assert any("Unknown transform 'shout'" in e for e in errors)

    def test_duplicate_destination_rejected(self):
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_mapping_tables({
                "document_type": "x",
                "entries": [
                    {"source_key": "a", "destination_field": "Same"},
                    {"source_key": "b", "destination_field": "Same"},
                ],
            })

        assert "Duplicate destination fields" in str(exc_info.value)


class TestConfigurationDirectory:
    """Tests for loading a whole configuration directory."""

    def test_load_from_directory(self, tmp_path):
        (tmp_path / "questionnaires").mkdir()
        (tmp_path / "questionnaires" / "intake.json").write_text(
            json.dumps(questionnaire()), encoding="utf-8"
        )
        (tmp_path / "mappings.json").write_text(
            json.dumps({"tables": [{"document_type": "memo", "entries": [
                {"source_key": "full-name", "destination_field": "Name"}
            ]}]}),
            encoding="utf-8",
        )
        manager = ConfigurationManager(config_dir=tmp_path)

        result = manager.load_from_directory()

        assert result.is_valid
        assert manager.get_schema("intake") is not None
        assert manager.get_mapping_table("memo") is not None
        summary = manager.to_dict()
        assert summary["questionnaires"][0]["questions"] == 3
        assert summary["mapping_tables"] == {"memo": ["Name"]}

    def test_directory_errors_are_collected(self, tmp_path):
        (tmp_path / "questionnaires").mkdir()
        (tmp_path / "questionnaires" / "bad.json").write_text("[{\"id\": \"x\"}]", encoding="utf-8")

        result = ConfigurationManager().load_from_directory(tmp_path)

        assert isinstance(result, ValidationResult)
        assert not result.is_valid
        assert any("bad.json" in e for e in result.errors)

    def test_no_directory(self):
        with pytest.raises(ConfigurationError):
            ConfigurationManager().load_from_directory()

    def test_reset(self):
        manager = ConfigurationManager()
        manager.load_questionnaires(questionnaire())
        manager.reset()
        assert not manager.is_loaded
        assert manager.get_schema("intake") is None
