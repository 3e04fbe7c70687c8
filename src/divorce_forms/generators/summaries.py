"""Plain-language summary documents.

A summary is composed from scratch for the petition, the financial
affidavit and the parenting plan when a readable overview of the answers
is wanted instead of the official court form. Summaries read the same
answers as the official forms and format them with the same transforms,
derived fields and aggregates, so both renditions of a document agree.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..mappings.aggregates import (
    ACCOUNT_KEYS,
    CHILDREN_KEYS,
    DEBT_KEYS,
    FINANCIAL_AFFIDAVIT_AGGREGATES,
    FOOD_PERSONAL_KEYS,
    HEALTHCARE_KEYS,
    HOUSING_KEYS,
    INCOME_KEYS,
    OTHER_EXPENSE_KEYS,
    TRANSPORTATION_KEYS,
    UTILITY_KEYS,
    NetOf,
    Sum,
    compute_aggregates,
)
from ..mappings.apply import apply_mapping
from ..mappings.derived import MAX_CHILDREN, compute_derived_fields
from ..mappings.tables import FINANCIAL_AFFIDAVIT, PARENTING_PLAN
from ..mappings.transforms import format_currency, format_date, format_grounds, long_date
from ..models.enums import FieldKind
from ..models.responses import coerce_number, normalize_responses
from .composer import BLANK, FreeformComposer, PageLayout
from .settlement_agreement import DEFAULT_PRODUCT_NAME, format_timestamp

logger = logging.getLogger(__name__)

# Response keys whose label is not their words capitalized
LABELS = {
    "hoa-fees": "HOA fees",
    "phone-cell": "Cell phone",
    "retirement-401k": "401(k)",
    "retirement-ira": "IRA",
    "other-income-amount": "Other income",
    "social-security-last-four": "SSN (last four)",
    "full-name": "Name",
    "current-address": "Address",
    "education-authority": "Education decisions",
    "healthcare-authority": "Healthcare decisions",
    "religious-authority": "Religious decisions",
    "extracurricular-authority": "Extracurricular activities",
    "primary-residence": "Primary residential parent",
    "weekend-exchange-day": "Weekends start",
    "weekend-return-day": "Weekends end",
    "holiday-approach": "General approach",
    "thanksgiving-odd-years": "Thanksgiving (odd years)",
    "christmas-eve-odd-years": "Christmas Eve (odd years)",
    "christmas-day-odd-years": "Christmas Day (odd years)",
    "summer-approach": "Approach",
    "summer-vacation-weeks": "Vacation weeks per parent",
    "vacation-notice-days": "Vacation notice required (days)",
    "communication-method": "Primary method",
    "response-time": "Expected response time",
    "child-phone-contact": "Child phone/video contact",
    "transportation-responsibility": "Transportation",
    "refusal-hours": "Right of first refusal applies after (hours)",
    "relocation-notice": "Relocation notice required (days)",
    "additional-notes": "Additional notes",
}


def label_for(key: str) -> str:
    """Human label for a response key, e.g. ``gross-monthly-salary`` -> ``Gross monthly salary``."""
    label = LABELS.get(key)
    if label:
        return label
    words = key.split("-")
    return " ".join([words[0].capitalize()] + words[1:])


def _text(responses: Mapping[str, Any], key: str) -> str:
    value = responses.get(key)
    if value is None or isinstance(value, list):
        return ""
    return str(value).strip()


def _amount(responses: Mapping[str, Any], key: str) -> float:
    value = coerce_number(responses.get(key))
    return 0.0 if value is None else value


class SummaryComposer:
    """
    Base class for summary documents.

    Subclasses set ``title`` and lay out their body in ``write_body``; the
    disclaimer footer is shared.

    Args:
        layout: Page layout passed to each ``FreeformComposer``.
        product_name: Name printed in the disclaimer footer.
    """

    title = "Summary"

    def __init__(self, layout: Optional[PageLayout] = None, product_name: str = DEFAULT_PRODUCT_NAME):
        self.layout = layout or PageLayout()
        self.product_name = product_name

    def compose(self, responses: Mapping[str, Any], generated_at: datetime) -> bytes:
        return self.build(responses, generated_at).render()

    def build(self, responses: Mapping[str, Any], generated_at: datetime) -> FreeformComposer:
        """Lay the summary out on a composer without rendering it."""
        values = normalize_responses(responses)
        composer = FreeformComposer(self.layout, title=self.title)
        self.write_body(composer, values, generated_at)
        composer.disclaimer_footer([
            f"DISCLAIMER: This document was generated by {self.product_name} "
            "for informational purposes only.",
            "This is not legal advice. Please consult with an attorney before filing with the court.",
            f"Generated: {format_timestamp(generated_at)}",
        ])
        logger.info(f"Composed {self.title.lower()} summary: {composer.page_count} page(s)")
        return composer

    def write_body(self, composer: FreeformComposer, responses: Mapping[str, Any], generated_at: datetime) -> None:
        raise NotImplementedError

    def _title(self, composer: FreeformComposer, subtitle: str = "State of Illinois") -> None:
        layout = composer.layout
        composer.text(self.title.upper(), 0, font=layout.bold_font, size=16, centered=True)
        composer.advance(layout.line_height + 4)
        composer.text(subtitle, 0, font=layout.italic_font, centered=True)
        composer.advance(layout.line_height + 16)


# ============================================================================
# Petition
# ============================================================================

PRAYER_FOR_RELIEF = (
    "A. Enter a Judgment dissolving the marriage between the parties;",
    "B. Divide the marital property equitably between the parties;",
    "C. Award such other and further relief as the Court deems just and proper.",
)

VERIFICATION = (
    "Under penalties as provided by law pursuant to Section 1-109 of the Code of Civil "
    "Procedure, the undersigned certifies that the statements set forth in this instrument "
    "are true and correct, except as to matters therein stated to be on information and "
    "belief and as to such matters the undersigned certifies as aforesaid that the "
    "undersigned verily believes the same to be true."
)


class PetitionSummaryComposer(SummaryComposer):
    """
    Petition for dissolution of marriage in numbered paragraphs.

    Args:
        with_children: List each child under the children paragraph.
    """

    title = "Petition for Dissolution of Marriage"

    def __init__(
        self,
        layout: Optional[PageLayout] = None,
        product_name: str = DEFAULT_PRODUCT_NAME,
        with_children: bool = False
    ):
        super().__init__(layout, product_name)
        self.with_children = with_children

    @property
    def document_type(self) -> str:
        return "petition-with-children" if self.with_children else "petition-no-children"

    def write_body(self, composer: FreeformComposer, responses: Mapping[str, Any], generated_at: datetime) -> None:
        derived = compute_derived_fields(self.document_type, responses, generated_at)
        layout = composer.layout
        petitioner = derived.get("PetitionerFullName") or BLANK
        respondent = derived.get("RespondentFullName") or BLANK
        county = derived.get("CountyHeader") or f"{BLANK} County"

        composer.text("IN THE CIRCUIT COURT OF", 0, font=layout.bold_font, size=12, centered=True)
        composer.advance(layout.line_height + 2)
        composer.text(f"{county.upper()}, ILLINOIS", 0, font=layout.bold_font, size=12, centered=True)
        composer.advance(layout.line_height + 15)
        composer.text("In re the Marriage of:", layout.left_margin, font=layout.italic_font)
        composer.advance(layout.line_height + 5)
        composer.caption(petitioner, "Petitioner")
        composer.advance()
        composer.text("and", layout.left_margin)
        composer.advance()
        composer.caption(respondent, "Respondent")
        composer.advance(layout.line_height + 5)
        composer.text(f"Case No.: {derived.get('CaseNumber') or BLANK}", 400)
        composer.advance(layout.line_height + 15)
        composer.text(self.title.upper(), 0, font=layout.bold_font, size=14, centered=True)
        composer.advance(layout.line_height + 15)
        composer.text(f"NOW COMES the Petitioner, {petitioner}, and states as follows:", layout.left_margin)
        composer.advance(layout.line_height + 10)

        residency = derived.get("ResidencyDuration") or f"{BLANK} months"
        composer.paragraph("Residency", [
            "Petitioner has been a resident of the State of Illinois for at least 90 days prior "
            f"to the filing of this petition. Petitioner has resided in {county} for "
            f"approximately {residency}."
        ])

        marriage = [f"The parties were married on {format_date(responses.get('marriage-date')) or BLANK}."]
        if derived.get("YearsOfMarriage"):
            marriage.append(f"The marriage has lasted {derived['YearsOfMarriage']} years.")
        composer.paragraph("Marriage", marriage)

        separated = format_date(responses.get("separation-date")) or BLANK
        composer.paragraph("Separation", [f"The parties separated on or about {separated}."])
        composer.paragraph("Grounds for Dissolution", self._grounds(responses))
        composer.paragraph("Children", self._children(derived))
        composer.paragraph("Property", [
            "The parties have acquired property during the marriage which should be divided "
            "equitably between the parties."
        ])
        composer.paragraph("Other Proceedings", [
            "To the best of Petitioner's knowledge, no other action for dissolution, legal "
            "separation, or declaration of invalidity of marriage is pending in any court."
        ])
        composer.section("Wherefore, Petitioner prays that this Court:", PRAYER_FOR_RELIEF)

        composer.text("Respectfully submitted,", layout.left_margin)
        composer.advance(layout.line_height + 30)
        composer.signature_block(petitioner, "Petitioner, Pro Se", gap=5)
        composer.text(_text(responses, "petitioner-address") or BLANK, layout.left_margin)
        composer.advance(layout.line_height + 20)

        composer.section("Verification", [VERIFICATION])
        composer.advance(20)
        composer.signature_block(petitioner, "Petitioner")

    def _grounds(self, responses: Mapping[str, Any]) -> List[str]:
        grounds = _text(responses, "grounds-type")
        if grounds != "irreconcilable":
            return [f"Grounds: {format_grounds(grounds) if grounds else 'Not specified'}."]
        duration = coerce_number(responses.get("irreconcilable-duration"))
        months = f"{duration:g}" if duration else BLANK
        return [
            "Irreconcilable differences have caused the irretrievable breakdown of the marriage. "
            "The parties have lived separate and apart for a continuous period of approximately "
            f"{months} months. Efforts at reconciliation have failed or future attempts at "
            "reconciliation would be impracticable and not in the best interests of the family."
        ]

    def _children(self, derived: Mapping[str, str]) -> List[str]:
        if not self.with_children:
            return ["There are no minor children born or adopted of this marriage."]
        lines = ["There are minor children born or adopted of this marriage:"]
        lines.extend(_child_lines(derived, details=False))
        return lines


def _child_lines(fields: Mapping[str, str], details: bool) -> List[str]:
    lines = []
    for index in range(1, MAX_CHILDREN + 1):
        name = fields.get(f"Child{index}Name")
        if not name:
            continue
        line = f"Child {index}: {name}"
        if fields.get(f"Child{index}DOB"):
            line += f", born {fields[f'Child{index}DOB']} (age {fields[f'Child{index}Age']})"
        lines.append(line)
        if details:
            for suffix, label in (("School", "school"), ("SpecialNeeds", "special needs")):
                value = fields.get(f"Child{index}{suffix}")
                if value:
                    lines.append(f"Child {index} {label}: {value}")
    return lines


# ============================================================================
# Financial affidavit
# ============================================================================

EXPENSE_CATEGORIES: Tuple[Tuple[str, Sequence[str]], ...] = (
    ("Housing", HOUSING_KEYS),
    ("Utilities", UTILITY_KEYS),
    ("Transportation", TRANSPORTATION_KEYS),
    ("Food and personal", FOOD_PERSONAL_KEYS),
    ("Healthcare", HEALTHCARE_KEYS),
    ("Children", CHILDREN_KEYS),
    ("Other", OTHER_EXPENSE_KEYS),
)

AFFIANT_SECTIONS = ("personal-info", "employment-income")

ASSET_EQUITY: Tuple[Tuple[str, NetOf], ...] = (
    ("Primary residence (equity)", NetOf("primary-residence-value", "primary-residence-mortgage")),
    ("Other real estate (equity)", NetOf("other-property-value", "other-property-mortgage")),
    ("Vehicle 1 (equity)", NetOf("vehicle-1-value", "vehicle-1-loan")),
    ("Vehicle 2 (equity)", NetOf("vehicle-2-value", "vehicle-2-loan")),
)


class FinancialAffidavitSummaryComposer(SummaryComposer):
    """
    Financial affidavit overview: income, expenses by category, assets,
    debts and the net figures, using the same totals as the official form.
    """

    title = "Financial Affidavit"

    def write_body(self, composer: FreeformComposer, responses: Mapping[str, Any], generated_at: datetime) -> None:
        totals = compute_aggregates(responses, FINANCIAL_AFFIDAVIT_AGGREGATES)
        self._title(composer)

        mapped = apply_mapping(FINANCIAL_AFFIDAVIT, responses)
        affiant = [
            f"{label_for(entry.source_key)}: {mapped[entry.destination_field]}"
            for entry in FINANCIAL_AFFIDAVIT
            if entry.section_tag in AFFIANT_SECTIONS and entry.field_kind is not FieldKind.NUMBER
            and entry.destination_field in mapped
        ]
        affiant.append(f"Date prepared: {long_date(generated_at.date())}")
        composer.section("Affiant", affiant)

        income = self._amount_lines(responses, INCOME_KEYS, "/month")
        composer.section("Income", (income or ["No income sources reported."]) + [
            f"Total monthly income: {format_currency(totals['TotalMonthlyIncome'])}"
        ])

        expenses = []
        for label, keys in EXPENSE_CATEGORIES:
            subtotal = Sum(*keys).evaluate(responses, {})
            if subtotal:
                expenses.append(f"{label}: {format_currency(subtotal)}/month")
        composer.section("Monthly Expenses", (expenses or ["No expenses reported."]) + [
            f"Total monthly expenses: {format_currency(totals['TotalMonthlyExpenses'])}"
        ])

        assets = []
        for label, term in ASSET_EQUITY:
            equity = term.evaluate(responses, {})
            if equity:
                assets.append(f"{label}: {format_currency(equity)}")
        assets.extend(self._amount_lines(responses, ACCOUNT_KEYS))
        composer.section("Assets", (assets or ["No assets reported."]) + [
            f"Total assets: {format_currency(totals['TotalAssets'])}"
        ])

        debts = self._amount_lines(responses, DEBT_KEYS)
        composer.section("Debts and Liabilities", (debts or ["No debts reported."]) + [
            f"Total debts: {format_currency(totals['TotalLiabilities'])}"
        ])

        composer.section("Summary", [
            f"Net monthly income: {format_currency(totals['NetMonthlyIncome'])}",
            f"Net worth: {format_currency(totals['NetWorth'])}",
        ])
        composer.advance(20)
        composer.signature_block(_text(responses, "full-name") or BLANK, "Affiant")

    @staticmethod
    def _amount_lines(responses: Mapping[str, Any], keys: Sequence[str], suffix: str = "") -> List[str]:
        lines = []
        for key in keys:
            amount = _amount(responses, key)
            if amount:
                lines.append(f"{label_for(key)}: {format_currency(amount)}{suffix}")
        return lines


# ============================================================================
# Parenting plan
# ============================================================================

# Table sections in reading order, with the derived narrative each one ends with
PLAN_SECTIONS: Tuple[Tuple[str, str, Optional[str]], ...] = (
    ("decision-making", "Decision-Making Authority", None),
    ("regular-schedule", "Regular Parenting Schedule", "ScheduleDescription"),
    ("holidays", "Holiday Schedule", "HolidayScheduleDescription"),
    ("summer-schedule", "Summer Vacation Schedule", None),
    ("communication", "Communication Protocols", None),
    ("transportation", "Transportation and Exchanges", "TransportationDetails"),
    ("additional-provisions", "Additional Provisions", None),
)


class ParentingPlanSummaryComposer(SummaryComposer):
    """
    Parenting plan overview, one section per group of plan answers.

    Sections with no answers still appear, marked as not addressed, so a
    reader can tell an omitted topic from a missing page.
    """

    title = "Parenting Plan"

    def write_body(self, composer: FreeformComposer, responses: Mapping[str, Any], generated_at: datetime) -> None:
        mapped = apply_mapping(PARENTING_PLAN, responses)
        derived = compute_derived_fields(PARENTING_PLAN.document_type, responses, generated_at)
        self._title(composer)

        parents = [
            f"Parent 1 (Petitioner): {derived['Parent1Name']}",
            f"Parent 2 (Respondent): {derived['Parent2Name']}",
        ]
        if derived.get("CaseNumber"):
            parents.append(f"Case No.: {derived['CaseNumber']}")
        composer.section("Parents", parents)

        children = _child_lines(derived, details=True)
        if children:
            named = sum(1 for index in range(1, MAX_CHILDREN + 1) if f"Child{index}Name" in derived)
            count = mapped.get("NumberOfChildren") or str(named)
            composer.section("Children", [f"Number of children: {count}"] + children)

        for section, heading, narrative in PLAN_SECTIONS:
            lines = [
                f"{label_for(entry.source_key)}: {mapped[entry.destination_field]}"
                for entry in PARENTING_PLAN.entries_for_section(section)
                if entry.destination_field in mapped
            ]
            if narrative and derived.get(narrative):
                lines.append(derived[narrative])
            composer.section(heading, lines or ["Not addressed."])

        composer.advance(20)
        composer.signature_block(derived["Parent1Name"], "Parent 1 (Petitioner)")
        composer.signature_block(derived["Parent2Name"], "Parent 2 (Respondent)", gap=30)


def default_summaries(layout: Optional[PageLayout] = None) -> Dict[str, SummaryComposer]:
    """Summary composers keyed by canonical document type."""
    return {
        "petition-no-children": PetitionSummaryComposer(layout),
        "petition-with-children": PetitionSummaryComposer(layout, with_children=True),
        "financial-affidavit": FinancialAffidavitSummaryComposer(layout),
        "parenting-plan": ParentingPlanSummaryComposer(layout),
    }
