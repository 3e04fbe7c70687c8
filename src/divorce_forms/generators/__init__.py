"""Document generators: official template filling, freeform composition and summaries."""

from .composer import BLANK, FreeformComposer, PageLayout, wrap_line
from .pdf_filler import FilledDocument, FillReport, PdfFormFiller, finalize, list_template_fields
from .settlement_agreement import SettlementAgreementComposer
from .summaries import (
    FinancialAffidavitSummaryComposer,
    ParentingPlanSummaryComposer,
    PetitionSummaryComposer,
    SummaryComposer,
    default_summaries,
)
from .template_source import (
    FileSystemTemplateSource,
    InMemoryTemplateSource,
    TemplateSource,
    get_template_dir,
)

__all__ = [
    "BLANK",
    "FreeformComposer",
    "PageLayout",
    "wrap_line",
    "FilledDocument",
    "FillReport",
    "PdfFormFiller",
    "finalize",
    "list_template_fields",
    "SettlementAgreementComposer",
    "SummaryComposer",
    "PetitionSummaryComposer",
    "FinancialAffidavitSummaryComposer",
    "ParentingPlanSummaryComposer",
    "default_summaries",
    "FileSystemTemplateSource",
    "InMemoryTemplateSource",
    "TemplateSource",
    "get_template_dir",
]
