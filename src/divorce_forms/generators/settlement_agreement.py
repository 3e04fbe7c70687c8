"""Marital settlement agreement composition.

The settlement agreement has no official template, so it is composed
clause by clause from the responses. Whole clauses are included or left
out depending on the answers (child support only with children, name
restoration only when requested). Response keys are read in kebab-case
with a camelCase fallback.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from ..mappings.transforms import format_currency, format_date, format_duration_months, long_date
from ..models.responses import coerce_number, first_value, normalize_responses
from .composer import BLANK, FreeformComposer, PageLayout

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "FreshStart IL"

NOT_STATED = ("not_sure", "not_addressed")

PRENUP_PRE_MARITAL = {
    "each_keeps_own": "Each party retains property owned before marriage",
    "some_shared": "Some pre-marital property is shared or split",
}

PRENUP_MARITAL = {
    "each_keeps_own": "Each party keeps property in their own name",
    "mixed": "Some property is shared/split, others are separate",
}

PRENUP_MAINTENANCE = {
    "waiver": "The prenuptial/postnuptial agreement provides for a waiver of spousal maintenance.",
    "formula_or_amount": "The prenuptial/postnuptial agreement sets specific terms for spousal maintenance.",
    "refer_to_law": "The prenuptial/postnuptial agreement leaves maintenance to Illinois law and court decisions.",
}

JOINT_SPLIT = {
    "fifty_fifty": "equally (50/50)",
    "sixty_forty_p": "60% to Petitioner, 40% to Respondent",
    "sixty_forty_r": "40% to Petitioner, 60% to Respondent",
}

RETIREMENT = {
    "keep_own": "Each party shall retain their own retirement accounts without division.",
    "qdro_split": (
        "Retirement accounts acquired during the marriage shall be divided equally via "
        "Qualified Domestic Relations Order (QDRO)."
    ),
    "offset": "Retirement account values shall be offset against other marital assets.",
}

HEALTH_INSURANCE = {
    "petitioner": "Petitioner shall provide health insurance for the minor children.",
    "respondent": "Respondent shall provide health insurance for the minor children.",
    "both": "The Parties shall share the cost of health insurance for the minor children.",
}

ATTORNEY_FEES = {
    "own": "Each party shall be responsible for their own attorney fees and costs.",
    "petitioner": "Petitioner shall pay all attorney fees and costs incurred by both parties.",
    "respondent": "Respondent shall pay all attorney fees and costs incurred by both parties.",
    "split": "Attorney fees and costs shall be divided equally between the Parties.",
}

GENERAL_PROVISIONS = (
    "This Agreement constitutes the entire agreement between the Parties and supersedes "
    "all prior negotiations and agreements.",
    "This Agreement may only be modified by written agreement signed by both Parties.",
    "Each party acknowledges that they have had the opportunity to consult with "
    "independent legal counsel before signing this Agreement.",
    "Both Parties agree to execute any documents necessary to effectuate the terms of "
    "this Agreement.",
)


def _camel(key: str) -> str:
    head, *rest = key.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _is_yes(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "yes"


def format_timestamp(moment: datetime) -> str:
    """Render ``Monday, October 19, 2026 at 3:04 PM``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.strftime('%A')}, {long_date(moment.date())} at {hour}:{moment.minute:02d} {meridiem}"


class SettlementAgreementComposer:
    """
    Composes an Illinois marital settlement agreement.

    Args:
        layout: Page layout passed to each ``FreeformComposer``.
        product_name: Name printed in the disclaimer footer.
    """

    def __init__(self, layout: Optional[PageLayout] = None, product_name: str = DEFAULT_PRODUCT_NAME):
        self.layout = layout or PageLayout()
        self.product_name = product_name

    def compose(self, responses: Mapping[str, Any], generated_at: datetime) -> bytes:
        """
        Compose the agreement and return the PDF bytes.

        Args:
            responses: Response snapshot.
            generated_at: Timestamp printed in the footer.

        Returns:
            The rendered PDF.
        """
        return self.build(responses, generated_at).render()

    def build(self, responses: Mapping[str, Any], generated_at: datetime) -> FreeformComposer:
        """Lay the agreement out on a composer without rendering it."""
        clauses = _Clauses(normalize_responses(responses))
        composer = FreeformComposer(self.layout, title="Marital Settlement Agreement")

        self._header(composer, clauses)
        composer.paragraph("Introduction", clauses.introduction())
        if clauses.has_prenup:
            composer.paragraph("Prenuptial/Postnuptial Agreement", clauses.prenup())
        composer.paragraph("Real Estate", clauses.real_estate())
        composer.paragraph("Vehicles", clauses.vehicles())
        composer.paragraph("Financial Accounts", clauses.financial_accounts())
        composer.paragraph("Allocation of Debts", clauses.debts())
        composer.paragraph("Spousal Maintenance", clauses.maintenance())
        child_support = clauses.child_support()
        if child_support:
            composer.paragraph("Child Support", child_support)
        composer.paragraph("Personal Property", clauses.personal_property())
        name_restoration = clauses.name_restoration()
        if name_restoration:
            composer.paragraph("Name Restoration", name_restoration)
        composer.paragraph("Attorney Fees", clauses.attorney_fees())
        additional = clauses.text("additional-terms")
        if additional:
            composer.paragraph("Additional Terms", [additional])
        composer.paragraph("General Provisions", list(GENERAL_PROVISIONS))

        self._signatures(composer, clauses)
        composer.disclaimer_footer([
            f"DISCLAIMER: This document was generated by {self.product_name} "
            "for informational purposes only.",
            "This is not legal advice. Please consult with an attorney before signing "
            "or filing with the court.",
            f"Generated: {format_timestamp(generated_at)}",
        ])
        logger.info(
            f"Composed settlement agreement: {composer.paragraph_number - 1} paragraphs, "
            f"{composer.page_count} page(s)"
        )
        return composer

    def _header(self, composer: FreeformComposer, clauses: "_Clauses") -> None:
        layout = composer.layout
        composer.text("IN THE CIRCUIT COURT OF ILLINOIS", 0, font=layout.bold_font, size=12, centered=True)
        composer.advance(layout.line_height + 10)
        composer.text("In re the Marriage of:", layout.left_margin, font=layout.italic_font)
        composer.advance(layout.line_height + 5)
        composer.caption(clauses.petitioner, "Petitioner")
        composer.advance()
        composer.text("and", layout.left_margin)
        composer.advance()
        composer.caption(clauses.respondent, "Respondent")
        composer.advance(layout.line_height + 5)
        composer.text(f"Case No.: {clauses.text('case-number') or BLANK}", 400)
        composer.advance(layout.line_height + 15)
        composer.text("MARITAL SETTLEMENT AGREEMENT", 0, font=layout.bold_font, size=14, centered=True)
        composer.advance(layout.line_height + 20)

    def _signatures(self, composer: FreeformComposer, clauses: "_Clauses") -> None:
        layout = composer.layout
        composer.check_page()
        composer.advance(20)
        composer.text("IN WITNESS WHEREOF, the Parties have executed this Agreement.", layout.left_margin)
        composer.advance(layout.line_height + 30)
        composer.signature_block(clauses.petitioner, "Petitioner")
        composer.signature_block(clauses.respondent, "Respondent", gap=30)


class _Clauses:
    """Clause texts for one response snapshot."""

    def __init__(self, responses: Mapping[str, Any]):
        self.responses = responses
        self.petitioner = self.text("petitioner-name") or BLANK
        self.respondent = self.text("respondent-name") or BLANK
        self.has_prenup = _is_yes(self.value("has-prenup"))

    def value(self, key: str) -> Any:
        return first_value(self.responses, key, _camel(key))

    def text(self, key: str) -> str:
        value = self.value(key)
        if value is None or isinstance(value, list):
            return ""
        return str(value).strip()

    def number(self, key: str) -> float:
        value = coerce_number(self.value(key))
        return 0.0 if value is None else value

    def date(self, key: str) -> str:
        return format_date(self.value(key)) or BLANK

    # ========================================================================
    # Clauses
    # ========================================================================

    def introduction(self) -> List[str]:
        lines = [
            f'This Marital Settlement Agreement ("Agreement") is entered into between '
            f'{self.petitioner} ("Petitioner") and {self.respondent} ("Respondent"), '
            'collectively referred to as "the Parties."',
            f"The Parties were married on {self.date('marriage-date')}.",
        ]
        separated = self.date("separation-date")
        if separated != BLANK:
            lines.append(f"The Parties separated on or about {separated}.")

        if self.has_prenup:
            kind = {"prenup": "prenuptial", "postnup": "postnuptial"}.get(
                self.text("prenup-type"), "prenuptial/postnuptial"
            )
            lines.append(
                f"The Parties have a {kind} agreement and intend for the provisions of this "
                "Agreement to be consistent with that agreement, subject to court approval."
            )
            if self.text("prenup-follow-status") != "both_follow":
                lines.append(
                    "The Parties acknowledge that certain terms may differ from the original "
                    "agreement and have agreed to these modifications."
                )

        lines.append(
            "The Parties desire to settle all matters arising from their marriage, including "
            "the division of property, allocation of debts, and any other matters between them."
        )
        return lines

    def prenup(self) -> List[str]:
        lines = [
            "The Parties acknowledge that they have a prenuptial/postnuptial agreement that "
            "addresses certain aspects of property division, debt allocation, and/or spousal "
            "maintenance."
        ]
        pre_marital = self.text("prenup-pre-marital-property-rule")
        if pre_marital and pre_marital not in NOT_STATED:
            text = PRENUP_PRE_MARITAL.get(pre_marital, "Most property is treated as shared/marital")
            lines.append(f"Regarding pre-marital property: {text}.")

        marital = self.text("prenup-marital-property-rule")
        if marital and marital not in NOT_STATED:
            text = PRENUP_MARITAL.get(marital, "Most or all property is shared/split")
            lines.append(f"Regarding marital property: {text}.")

        debt = self.text("prenup-debt-rule")
        if debt and debt not in NOT_STATED:
            text = (
                "Each party is responsible for debts in their own name"
                if debt == "each_keeps_own" else "Most debts are shared/split"
            )
            lines.append(f"Regarding debts: {text}.")

        maintenance = PRENUP_MAINTENANCE.get(self.text("prenup-maintenance-terms"))
        if maintenance:
            lines.append(maintenance)

        other = self.text("prenup-other-key-terms")
        if other:
            lines.append(f"Additional terms from the agreement: {other}")

        lines.append(
            "The provisions of this Marital Settlement Agreement are intended to be consistent "
            "with the prenuptial/postnuptial agreement, subject to court approval and any "
            "modifications agreed upon by the Parties."
        )

        uploaded = self.value("uploaded-prenup-documents")
        if isinstance(uploaded, list) and uploaded:
            lines.append("")
            lines.append(
                "The Parties have uploaded the following prenuptial/postnuptial agreement "
                "document(s) with this case:"
            )
            lines.extend(f"- {name}" for name in uploaded)
            lines.append(
                "These documents are available for reference and should be provided to the "
                "court if requested."
            )
        return lines

    def real_estate(self) -> List[str]:
        if not _is_yes(self.value("has-marital-home")):
            return ["The Parties do not own any real estate subject to division in this Agreement."]

        address = self.text("marital-home-address")
        value = self.number("marital-home-value")
        mortgage = self.number("marital-home-mortgage")
        disposition = self.text("marital-home-disposition")

        if disposition == "petitioner_keeps":
            terms = (
                "Petitioner shall retain the marital home. Petitioner shall be solely "
                "responsible for the mortgage and shall hold Respondent harmless from any "
                "obligations related to the property."
            )
        elif disposition == "respondent_keeps":
            terms = (
                "Respondent shall retain the marital home. Respondent shall be solely "
                "responsible for the mortgage and shall hold Petitioner harmless from any "
                "obligations related to the property."
            )
        elif disposition == "sell_split":
            terms = (
                "The marital home shall be listed for sale within 90 days. The net proceeds "
                "(after payment of mortgage, closing costs, and realtor fees) shall be divided "
                "equally (50/50) between the Parties."
            )
        elif disposition == "sell_unequal":
            share = self.number("split-percentage-petitioner") or 50
            share_text = f"{share:g}"
            other_text = f"{100 - share:g}"
            terms = (
                "The marital home shall be listed for sale. The net proceeds shall be divided "
                f"{share_text}% to Petitioner and {other_text}% to Respondent."
            )
        elif disposition == "buyout":
            terms = (
                "One party shall buy out the other's interest in the marital home for "
                f"{format_currency(self.value('home-buyout-amount'))}, to be paid within 90 days "
                "of the entry of the Judgment of Dissolution."
            )
        else:
            terms = ""

        lines = [
            f"The marital home is located at: {address}" if address
            else "The Parties own a marital home."
        ]
        if value:
            lines.append(f"Estimated market value: {format_currency(value)}")
        if mortgage:
            lines.append(f"Remaining mortgage balance: {format_currency(mortgage)}")
        if terms:
            lines.append(terms)
        return lines

    def vehicles(self) -> List[str]:
        lines = []
        for index in (1, 2):
            description = self.text(f"vehicle-{index}-description")
            if not description:
                continue
            owner = {"petitioner": "Petitioner", "respondent": "Respondent"}.get(
                self.text(f"vehicle-{index}-owner"), "to be sold"
            )
            lines.append(
                f"{description}: Awarded to {owner}. The receiving party shall be responsible "
                "for any remaining loan balance."
            )
        if not lines:
            lines.append("Each party shall retain any vehicle currently titled in their individual name.")
        return lines

    def financial_accounts(self) -> List[str]:
        approach = self.text("bank-account-approach")
        if approach == "keep_own":
            lines = ["Each party shall retain all bank accounts currently held in their individual name."]
        elif approach == "split_equal":
            lines = ["All bank accounts shall be divided equally (50/50) between the Parties."]
        else:
            lines = ["Bank accounts shall be divided as agreed between the Parties."]

        balance = self.number("joint-account-balance")
        if balance > 0:
            split = JOINT_SPLIT.get(self.text("joint-account-split"), "as agreed")
            lines.append(f"Joint accounts totaling {format_currency(balance)} shall be divided {split}.")

        retirement = RETIREMENT.get(self.text("retirement-division"))
        if retirement:
            lines.append(retirement)
        return lines

    def debts(self) -> List[str]:
        lines = []
        approach = self.text("debt-approach")
        if approach == "own_debts":
            lines.append("Each party shall be responsible for debts incurred in their individual name.")
        elif approach == "split_equal":
            lines.append("All marital debts shall be divided equally (50/50) between the Parties.")

        total = self.number("credit-card-debt-total")
        if total > 0:
            petitioner = self.number("credit-card-petitioner-responsibility")
            respondent = self.number("credit-card-respondent-responsibility")
            if petitioner and respondent:
                lines.append(
                    f"Credit card debt of {format_currency(total)}: Petitioner responsible for "
                    f"{format_currency(petitioner)}; Respondent responsible for "
                    f"{format_currency(respondent)}."
                )
            else:
                lines.append(f"Total credit card debt: {format_currency(total)} to be allocated as agreed.")

        other = self.text("other-debt-allocation")
        if other:
            lines.append(f"Other debts: {other}")

        if not lines:
            lines.append(
                "Each party shall be responsible for debts in their own name. Neither party "
                "shall incur debt in the other's name."
            )
        return lines

    def maintenance(self) -> List[str]:
        agreement = self.text("maintenance-agreement")
        if agreement == "none":
            return [
                "Neither party shall pay spousal maintenance to the other.",
                "Each party hereby waives any right to spousal maintenance, now and in the future.",
            ]
        if agreement == "reserved":
            return ["The issue of spousal maintenance is reserved for future determination by the Court."]
        if agreement not in ("petitioner_pays", "respondent_pays"):
            return []

        payer, payee = (
            ("Petitioner", "Respondent") if agreement == "petitioner_pays"
            else ("Respondent", "Petitioner")
        )
        lines = [
            f"{payer} shall pay {payee} spousal maintenance in the amount of "
            f"{format_currency(self.value('maintenance-amount'))} per month."
        ]
        duration = format_duration_months(self.number("maintenance-duration"))
        if duration:
            lines.append(f"Maintenance shall continue for a period of {duration}.")
        else:
            lines.append("Maintenance shall continue until further order of the Court.")
        modifiable = "is" if _is_yes(self.value("maintenance-modifiable")) else "is not"
        lines.append(f"This maintenance obligation {modifiable} modifiable.")
        lines.append(
            "Maintenance shall terminate upon the death of either party, remarriage of the "
            "receiving party, or cohabitation of the receiving party with another person on a "
            "resident, continuing conjugal basis."
        )
        return lines

    def child_support(self) -> List[str]:
        """Child support terms; empty when there are no children to support."""
        agreement = self.text("child-support-agreement")
        if not _is_yes(self.value("has-children")) or not agreement or agreement == "na":
            return []

        if agreement == "none":
            lines = ["Due to equal parenting time, no child support shall be exchanged between the Parties."]
        elif agreement == "guidelines":
            lines = [
                "Child support shall be calculated pursuant to Illinois statutory guidelines "
                "based on the parties' incomes and parenting time."
            ]
        else:
            payer, payee = (
                ("Petitioner", "Respondent") if agreement == "petitioner_pays"
                else ("Respondent", "Petitioner")
            )
            lines = [
                f"{payer} shall pay {payee} child support in the amount of "
                f"{format_currency(self.value('child-support-amount'))} per month."
            ]

        insurance = HEALTH_INSURANCE.get(self.text("health-insurance-children"))
        if insurance:
            lines.append(insurance)
        lines.append(
            "Uncovered medical, dental, and vision expenses for the children shall be divided "
            "between the Parties in proportion to their respective incomes."
        )
        return lines

    def personal_property(self) -> List[str]:
        approach = self.text("personal-property-approach")
        if approach == "already_divided":
            return [
                "The Parties have already divided their personal property to their mutual satisfaction.",
                "Each party shall retain all personal property currently in their possession.",
            ]
        if approach == "list_items":
            lines = []
            petitioner_items = self.text("petitioner-keeps-items")
            respondent_items = self.text("respondent-keeps-items")
            if petitioner_items:
                lines.append(f"Petitioner shall retain: {petitioner_items}")
            if respondent_items:
                lines.append(f"Respondent shall retain: {respondent_items}")
            return lines
        return ["Personal property shall be divided by agreement of the Parties."]

    def name_restoration(self) -> List[str]:
        name = self.text("name-to-restore")
        if not _is_yes(self.value("name-change")) or not name:
            return []
        party = "Petitioner" if name == self.petitioner else "Respondent"
        return [f"{party} shall be restored to the former name of {name}."]

    def attorney_fees(self) -> List[str]:
        fees = ATTORNEY_FEES.get(self.text("attorney-fees"))
        return [fees] if fees else []
