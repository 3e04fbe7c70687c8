"""Unit tests for field mapping tables, the registry and computed fields."""

import copy
import random
from datetime import datetime

import pytest

from divorce_forms.errors import ConfigurationError, UnsupportedDocumentTypeError
from divorce_forms.mappings import (
    FINANCIAL_AFFIDAVIT_AGGREGATES,
    PETITION_NO_CHILDREN,
    PETITION_WITH_CHILDREN,
    SETTLEMENT_AGREEMENT,
    AggregateField,
    AggregateSpec,
    Copy,
    Difference,
    FieldMappingRegistry,
    NetOf,
    Sum,
    apply_mapping,
    compute_aggregates,
    compute_derived_fields,
    format_aggregates,
    get_transform,
)
from divorce_forms.mappings.derived import age_on, full_name, years_between
from divorce_forms.models import FieldKind, FieldMappingEntry, FieldMappingTable

GENERATED_AT = datetime(2026, 10, 19, 15, 4)


def table(*pairs, document_type="test-form"):
    return FieldMappingTable(
        document_type,
        [FieldMappingEntry(source_key=s, destination_field=d) for s, d in pairs],
    )


class TestApplyMapping:
    """Tests for apply_mapping."""

    def test_absent_source_is_skipped(self):
        """Unanswered sources produce no key at all."""
        mapping = table(("full-name", "FullName"), ("ssn-last-four", "SSNLast4"))

        result = apply_mapping(mapping, {"full-name": "Jane Doe"})

        assert result == {"FullName": "Jane Doe"}

    def test_blank_and_empty_list_are_skipped(self):
        mapping = table(("a", "A"), ("b", "B"), ("c", "C"))

        assert apply_mapping(mapping, {"a": "  ", "b": [], "c": 0}) == {"C": "0"}

    def test_table_order_and_plain_rendering(self):
        mapping = table(("z", "Z"), ("a", "A"), ("flag", "Flag"), ("list", "List"))

        result = apply_mapping(mapping, {"a": 2.0, "z": "last", "flag": True, "list": ["x", "y"]})

        assert list(result) == ["Z", "A", "Flag", "List"]
        assert result == {"Z": "last", "A": "2", "Flag": "Yes", "List": "x, y"}

    def test_transform_applied(self):
        mapping = FieldMappingTable("t", [
            FieldMappingEntry("fee", "Fee", FieldKind.NUMBER, get_transform("currency")),
            FieldMappingEntry("married", "MarriedOn", FieldKind.DATE, get_transform("date")),
        ])

        result = apply_mapping(mapping, {"fee": "388", "married": "2015-06-20"})

        assert result == {"Fee": "$388.00", "MarriedOn": "June 20, 2015"}

    def test_address_block_is_joined(self):
        mapping = table(("home", "Home"))

        result = apply_mapping(mapping, {"home": {"street": "1 Main St", "city": "Springfield", "zip": ""}})

        assert result == {"Home": "1 Main St, Springfield"}

    def test_petition_with_children(self):
        responses = {
            "petitioner-first-name": "Jane",
            "petitioner-last-name": "Doe",
            "petitioner-county": "cook",
            "grounds-type": "irreconcilable",
            "has-children": "yes",
            "number-of-children": 2,
        }

        result = apply_mapping(PETITION_WITH_CHILDREN, responses)

        assert result["County"] == "Cook County"
        assert result["GroundsForDivorce"] == "Irreconcilable Differences"
        assert result["HasMinorChildren"] == "Yes"
        assert result["NumberOfChildren"] == "2"
        assert "RespondentFirstName" not in result


class TestApplyMappingRandomized:
    """Seeded random response maps over the built-in tables."""

    VALUES = [None, "", "  ", "text", 0, 1234.5, "-3", "2015-06-20", "not a date",
              "yes", "no", True, False, ["a", "b"], []]

    def _random_responses(self, rng, mapping):
        responses = {}
        for entry in mapping:
            if rng.random() < 0.8:
                responses[entry.source_key] = rng.choice(self.VALUES)
        keys = list(responses)
        rng.shuffle(keys)
        return {key: responses[key] for key in keys}

    @pytest.mark.parametrize("document_type", [
        "petition-with-children", "financial-affidavit", "parenting-plan", "summons",
    ])
    def test_deterministic_and_ordered(self, document_type):
        rng = random.Random(20261019)
        mapping = FieldMappingRegistry().resolve_table(document_type)
        destinations = [entry.destination_field for entry in mapping]

        for _ in range(200):
            responses = self._random_responses(rng, mapping)
            before = copy.deepcopy(responses)
            reordered = dict(reversed(list(responses.items())))

            first = apply_mapping(mapping, responses)
            second = apply_mapping(mapping, reordered)

            assert list(first.items()) == list(second.items())
            assert list(first) == [d for d in destinations if d in first]
            assert all(isinstance(value, str) for value in first.values())
            assert responses == before


class TestFieldMappingTable:
    """Tests for table construction and composition."""

    def test_duplicate_destination(self):
        with pytest.raises(ConfigurationError) as exc_info:
            table(("a", "Same"), ("b", "Same"))
        assert "Duplicate destination fields" in str(exc_info.value)

    def test_same_source_to_two_destinations(self):
        mapping = table(("name", "First"), ("name", "Second"))

        assert apply_mapping(mapping, {"name": "Jo"}) == {"First": "Jo", "Second": "Jo"}
        assert mapping.required_source_keys() == ["name"]

    def test_extend_appends_after_base(self):
        base = PETITION_NO_CHILDREN.destination_fields()

        assert PETITION_WITH_CHILDREN.destination_fields() == base + [
            "HasMinorChildren", "NumberOfChildren"
        ]

    def test_extend_rejects_repeated_destination(self):
        with pytest.raises(ConfigurationError):
            PETITION_NO_CHILDREN.extend("copy", [FieldMappingEntry("x", "County")])

    def test_extend_leaves_base_untouched(self):
        before = len(PETITION_NO_CHILDREN)
        PETITION_NO_CHILDREN.extend("bigger", [FieldMappingEntry("x", "Extra")])
        assert len(PETITION_NO_CHILDREN) == before

    def test_missing_source_keys(self):
        mapping = table(("a", "A"), ("b", "B"))
        assert mapping.missing_source_keys({"a": "x", "b": ""}) == ["b"]

    def test_section_entries(self):
        entries = PETITION_NO_CHILDREN.entries_for_section("residency")
        assert [e.destination_field for e in entries] == [
            "County", "PetitionerAddress", "RespondentAddress"
        ]


class TestFieldMappingRegistry:
    """Tests for the registry."""

    @pytest.fixture
    def registry(self):
        return FieldMappingRegistry()

    def test_resolve_builtin(self, registry):
        assert registry.resolve_table("petition-no-children") is PETITION_NO_CHILDREN

    @pytest.mark.parametrize("alias, canonical", [
        ("petition", "petition-no-children"),
        ("financial_affidavit", "financial-affidavit"),
        ("financial_affidavit_short", "financial-affidavit"),
        ("parenting_plan", "parenting-plan"),
        ("marital_settlement", SETTLEMENT_AGREEMENT),
    ])
    def test_aliases(self, registry, alias, canonical):
        assert registry.canonical_type(alias) == canonical

    def test_unsupported_type(self, registry):
        with pytest.raises(UnsupportedDocumentTypeError) as exc_info:
            registry.resolve_table("prenuptial-agreement")

        error = exc_info.value
        assert error.document_type == "prenuptial-agreement"
        assert "petition-no-children" in error.get_supported_types()
        assert SETTLEMENT_AGREEMENT in error.get_supported_types()

    def test_settlement_agreement_is_freeform(self, registry):
        assert registry.is_freeform("marital-settlement")
        assert not registry.is_freeform("petition")
        assert not registry.is_fillable(SETTLEMENT_AGREEMENT)
        assert SETTLEMENT_AGREEMENT in registry.supported_document_types()

    def test_template_path(self, registry):
        assert registry.template_path("petition") == "petition-dissolution-no-children.pdf"
        with pytest.raises(UnsupportedDocumentTypeError):
            registry.template_path("prenuptial-agreement")

    @pytest.mark.parametrize("document_type", [SETTLEMENT_AGREEMENT, "judgment-no-children"])
    def test_no_template_path_without_table(self, registry, document_type):
        with pytest.raises(UnsupportedDocumentTypeError):
            registry.template_path(document_type)

    def test_register_replaces(self, registry):
        replacement = table(("a", "A"), document_type="summons")

        registry.register_table(replacement)

        assert registry.resolve_table("summons") is replacement

    def test_empty_registry(self):
        registry = FieldMappingRegistry(tables=[])
        assert registry.supported_document_types() == [SETTLEMENT_AGREEMENT]


class TestAggregates:
    """Tests for computed aggregate fields."""

    def test_non_numeric_and_absent_count_as_zero(self):
        spec = AggregateSpec("total", (AggregateField("Total", Sum("a", "b", "c")),))

        computed = compute_aggregates({"a": 100, "b": "not-a-number"}, spec)

        assert computed == {"Total": 100}

    def test_net_of_is_floored(self):
        spec = AggregateSpec("equity", (
            AggregateField("Equity", Sum(NetOf("home", "mortgage"), "cash")),
        ))

        underwater = compute_aggregates({"home": 200000, "mortgage": 250000, "cash": 50}, spec)

        assert underwater == {"Equity": 50}

    def test_difference_and_copy(self):
        spec = AggregateSpec("net", (
            AggregateField("In", Sum("salary")),
            AggregateField("Out", Sum("rent")),
            AggregateField("Net", Difference("In", "Out")),
            AggregateField("NetAgain", Copy("Net")),
        ))

        computed = compute_aggregates({"salary": "1,000", "rent": 1500.25}, spec)

        assert list(computed) == ["In", "Out", "Net", "NetAgain"]
        assert computed["Net"] == pytest.approx(-500.25)
        assert format_aggregates(computed)["NetAgain"] == "-$500.25"

    def test_forward_reference_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AggregateSpec("bad", (AggregateField("Net", Difference("In", "Out")),))
        assert "before it is defined" in str(exc_info.value)

    def test_duplicate_field_rejected(self):
        with pytest.raises(ConfigurationError):
            AggregateSpec("bad", (
                AggregateField("Total", Sum("a")),
                AggregateField("Total", Sum("b")),
            ))

    def test_financial_affidavit(self):
        responses = {
            "gross-monthly-salary": 5000,
            "rental-income": "500",
            "monthly-rent-mortgage": 1800,
            "groceries": 600,
            "primary-residence-value": 300000,
            "primary-residence-mortgage": 200000,
            "checking-balance": 2500,
            "credit-card-debt": 4000,
        }

        computed = compute_aggregates(responses, FINANCIAL_AFFIDAVIT_AGGREGATES)

        assert computed["TotalMonthlyIncome"] == 5500
        assert computed["TotalGrossIncome"] == 5500
        assert computed["TotalMonthlyExpenses"] == 2400
        assert computed["NetMonthlyIncome"] == 3100
        assert computed["TotalAssets"] == 102500
        assert computed["TotalLiabilities"] == 204000
        assert computed["NetWorth"] == -101500
        assert computed["HousingSubtotal"] == 1800


class TestDerivedFields:
    """Tests for fields computed from several answers."""

    def test_name_helpers(self):
        assert full_name("Jane", "", "Doe") == "Jane Doe"
        assert full_name("", "") == ""

    def test_date_helpers(self):
        assert age_on(datetime(2010, 10, 20).date(), GENERATED_AT.date()) == 15
        assert age_on(datetime(2010, 10, 19).date(), GENERATED_AT.date()) == 16
        assert years_between(datetime(2015, 6, 20).date(), datetime(2025, 6, 19).date()) == 9

    def test_petition_fields(self):
        responses = {
            "petitioner-first-name": "Jane",
            "petitioner-middle-name": "Q",
            "petitioner-last-name": "Doe",
            "spouse-first-name": "John",
            "spouse-last-name": "Doe",
            "petitioner-county": "cook",
            "residency-duration-months": 27,
            "marriage-date": "2015-06-20",
            "separation-date": "2025-06-21",
        }

        fields = compute_derived_fields("petition-no-children", responses, GENERATED_AT)

        assert fields["PetitionerFullName"] == "Jane Q Doe"
        assert fields["RespondentFullName"] == "John Doe"
        assert fields["DateFiled"] == "October 19, 2026"
        assert fields["CountyHeader"] == "Cook County"
        assert fields["ResidencyDuration"] == "2 years and 3 months"
        assert fields["YearsOfMarriage"] == "10"
        assert "CaseNumber" not in fields

    def test_petition_children_rows_keep_their_number(self):
        responses = {
            "number-of-children": 3,
            "child-1-name": "Ann",
            "child-1-dob": "2016-01-01",
            "child-2-name": "Ben",
            "child-3-name": "Cal",
            "child-3-dob": "2018-05-05",
        }

        fields = compute_derived_fields("petition-with-children", responses, GENERATED_AT)

        assert fields["Child1Name"] == "Ann"
        assert fields["Child1Age"] == "10"
        assert fields["Child2Name"] == "Ben"
        assert "Child2DOB" not in fields
        assert "Child2Age" not in fields
        assert fields["Child3Name"] == "Cal"
        assert fields["Child3DOB"] == "May 5, 2018"

    def test_parenting_plan_defaults(self):
        fields = compute_derived_fields("parenting-plan", {}, GENERATED_AT)

        assert fields["Parent1Name"] == "Petitioner"
        assert fields["Parent2Name"] == "Respondent"
        assert "every other weekend" in fields["ScheduleDescription"]
        assert fields["HolidayScheduleDescription"].startswith("Holidays will alternate")
        assert fields["TransportationDetails"] == (
            "Exchanges will occur at Parent 1's Residence. Receiving Parent Picks Up. "
            "A grace period of 15 minutes is allowed."
        )

    def test_midweek_visit(self):
        fields = compute_derived_fields("parenting-plan", {
            "schedule-type": "week_on_off",
            "midweek-visit": "yes",
            "midweek-visit-day": "Wednesday",
        }, GENERATED_AT)

        assert fields["ScheduleDescription"].endswith("midweek visit on Wednesdays.")

    def test_no_clock_reads(self):
        responses = {"marriage-date": "2020-01-01"}
        first = compute_derived_fields("petition-no-children", responses, GENERATED_AT)
        second = compute_derived_fields("petition-no-children", responses, GENERATED_AT)
        assert first == second

    def test_unknown_type(self):
        assert compute_derived_fields("summons", {"a": 1}, GENERATED_AT) == {}
