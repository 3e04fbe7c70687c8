"""Unit tests for the summary composers."""

import io
from datetime import datetime

import pytest
from pypdf import PdfReader

from divorce_forms.generators import (
    FinancialAffidavitSummaryComposer,
    ParentingPlanSummaryComposer,
    PetitionSummaryComposer,
    default_summaries,
)
from divorce_forms.generators.summaries import label_for

GENERATED_AT = datetime(2026, 10, 19, 15, 4)


def composed_text(composer, responses):
    built = composer.build(responses, GENERATED_AT)
    return built, " ".join(built.lines)


class TestPetitionSummary:
    """Tests for the petition summary."""

    @pytest.fixture
    def responses(self):
        return {
            "petitioner-first-name": "Jane",
            "petitioner-last-name": "Doe",
            "spouse-first-name": "John",
            "spouse-last-name": "Doe",
            "petitioner-address": "1 Main St, Springfield",
            "petitioner-county": "cook",
            "residency-duration-months": 26,
            "marriage-date": "2015-06-20",
            "separation-date": "2025-01-10",
            "grounds-type": "irreconcilable",
            "irreconcilable-duration": 9,
            "has-children": "yes",
            "number-of-children": 2,
            "child-1-name": "Ann",
            "child-1-dob": "2016-04-02",
            "child-2-name": "Ben",
        }

    def test_caption_and_paragraphs(self, responses):
        built, text = composed_text(PetitionSummaryComposer(), responses)

        assert "COOK COUNTY, ILLINOIS" in built.lines
        assert "JANE DOE" in built.lines
        assert "PETITION FOR DISSOLUTION OF MARRIAGE" in built.lines
        assert "Petitioner has resided in Cook County for approximately 2 years and 2 months." in text
        assert "The parties were married on June 20, 2015." in text
        assert "The marriage has lasted 9 years." in text
        assert "The parties separated on or about January 10, 2025." in text
        assert "continuous period of approximately 9 months." in text
        assert "1 Main St, Springfield" in built.lines
        # Residency through Other Proceedings
        assert built.paragraph_number - 1 == 7

    def test_children_listed_only_with_children(self, responses):
        _, with_children = composed_text(PetitionSummaryComposer(with_children=True), responses)
        _, without = composed_text(PetitionSummaryComposer(), responses)

        assert "Child 1: Ann, born April 2, 2016 (age 10)" in with_children
        assert "Child 2: Ben" in with_children
        assert "There are no minor children" in without
        assert "Child 1" not in without

    def test_blanks_for_unanswered(self):
        built, text = composed_text(PetitionSummaryComposer(), {"grounds-type": "adultery"})

        assert "Case No.: _______________" in built.lines
        assert "The parties were married on _______________." in text
        assert "Grounds: Adultery." in text

    def test_footer(self, responses):
        built, _ = composed_text(PetitionSummaryComposer(), responses)

        assert built.lines[-1] == "Generated: Monday, October 19, 2026 at 3:04 PM"


class TestFinancialAffidavitSummary:
    """Tests for the financial affidavit summary."""

    def test_sections_and_totals(self):
        responses = {
            "full-name": "Jane Doe",
            "employment-status": "full_time",
            "gross-monthly-salary": 5000,
            "rental-income": "500",
            "monthly-rent-mortgage": 1500,
            "electricity": 100,
            "primary-residence-value": 300000,
            "primary-residence-mortgage": 200000,
            "checking-balance": 2500,
            "credit-card-debt": 4000,
        }

        built, text = composed_text(FinancialAffidavitSummaryComposer(), responses)

        assert "Name: Jane Doe" in built.lines
        assert "Employment status: Employed Full-Time" in built.lines
        assert "Gross monthly salary: $5,000.00/month" in built.lines
        assert "Total monthly income: $5,500.00" in built.lines
        assert "Housing: $1,500.00/month" in built.lines
        assert "Utilities: $100.00/month" in built.lines
        assert "Total monthly expenses: $1,600.00" in built.lines
        assert "Primary residence (equity): $100,000.00" in built.lines
        assert "Checking balance: $2,500.00" in built.lines
        # Equity already nets the mortgage; liabilities still list it
        assert "Total assets: $102,500.00" in built.lines
        assert "Total debts: $204,000.00" in built.lines
        assert "Net monthly income: $3,900.00" in built.lines
        assert "Net worth: -$101,500.00" in built.lines
        assert "Date prepared: October 19, 2026" in text

    def test_nothing_reported(self):
        built, _ = composed_text(FinancialAffidavitSummaryComposer(), {})

        for line in ("No income sources reported.", "No expenses reported.",
                     "No assets reported.", "No debts reported.", "Net worth: $0.00"):
            assert line in built.lines


class TestParentingPlanSummary:
    """Tests for the parenting plan summary."""

    def test_sections(self):
        responses = {
            "petitioner-first-name": "Jane",
            "petitioner-last-name": "Doe",
            "children-count": 2,
            "child-1-name": "Ann",
            "child-1-dob": "2016-04-02",
            "child-1-school": "Lincoln Elementary",
            "child-2-name": "Ben",
            "education-authority": "joint",
            "schedule-type": "week_on_off",
            "thanksgiving-odd-years": "parent1",
            "relocation-notice": 60,
        }

        built, text = composed_text(ParentingPlanSummaryComposer(), responses)

        assert "Parent 1 (Petitioner): Jane Doe" in built.lines
        assert "Parent 2 (Respondent): Respondent" in built.lines
        assert "Number of children: 2" in built.lines
        assert "Child 1: Ann, born April 2, 2016 (age 10)" in built.lines
        assert "Child 1 school: Lincoln Elementary" in built.lines
        assert "Child 2: Ben" in built.lines
        assert "Education decisions: Joint (Both Parents)" in built.lines
        assert "Schedule type: 50/50 - Week On/Week Off" in built.lines
        assert "week-on/week-off" in text
        assert "Thanksgiving (odd years): Petitioner (Parent 1)" in built.lines
        assert "Relocation notice required (days): 60" in built.lines

    def test_unanswered_sections_are_marked(self):
        built, _ = composed_text(ParentingPlanSummaryComposer(), {})

        assert "CHILDREN" not in built.lines
        assert "COMMUNICATION PROTOCOLS" in built.lines
        assert "Not addressed." in built.lines


class TestSummaries:

    def test_default_summaries(self):
        summaries = default_summaries()

        assert set(summaries) == {
            "petition-no-children", "petition-with-children", "financial-affidavit", "parenting-plan"
        }
        assert summaries["petition-with-children"].with_children
        assert not summaries["petition-no-children"].with_children

    @pytest.mark.parametrize("key, label", [
        ("gross-monthly-salary", "Gross monthly salary"),
        ("hoa-fees", "HOA fees"),
        ("relocation-notice", "Relocation notice required (days)"),
    ])
    def test_label_for(self, key, label):
        assert label_for(key) == label

    @pytest.mark.parametrize("composer", list(default_summaries().values()))
    def test_render_is_deterministic(self, composer):
        responses = {"petitioner-first-name": "Jane", "full-name": "Jane Doe"}

        first = composer.compose(responses, GENERATED_AT)
        second = composer.compose(responses, GENERATED_AT)

        assert first == second
        assert len(PdfReader(io.BytesIO(first)).pages) >= 1
