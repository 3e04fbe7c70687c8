"""Document generation pipeline.

Wires the mapping registry, the template source, the PDF filler and the
freeform composer together. One call turns a response snapshot into the
finalized bytes of one document type.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .errors import (
    ConfigurationError,
    DivorceFormsError,
    DocumentGenerationError,
    TemplateCorruptedError,
    TemplateFetchError,
    UnsupportedDocumentTypeError,
)
from .generators.pdf_filler import PdfFormFiller, finalize
from .generators.settlement_agreement import SettlementAgreementComposer
from .generators.summaries import SummaryComposer, default_summaries
from .generators.template_source import FileSystemTemplateSource, TemplateSource
from .mappings.aggregates import AGGREGATE_SPECS, compute_aggregates, format_aggregates
from .mappings.apply import apply_mapping
from .mappings.derived import compute_derived_fields
from .mappings.registry import FieldMappingRegistry, default_registry
from .mappings.transforms import is_truthy
from .models.document import GeneratedDocument
from .models.enums import GenerationMode
from .models.responses import coerce_number, normalize_responses

logger = logging.getLogger(__name__)

PETITION_NO_CHILDREN = "petition-no-children"
PETITION_WITH_CHILDREN = "petition-with-children"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _flatten_default() -> bool:
    return _env_flag("DIVORCE_FORMS_FLATTEN", True)


@dataclass
class PipelineConfig:
    """Configuration for the generation pipeline."""

    # Database configuration
    database_url: Optional[str] = None

    # Template directory (default: DIVORCE_FORMS_TEMPLATE_DIR or "forms")
    template_dir: Optional[str] = None

    # Burn values into page content when finalizing official forms
    flatten: bool = field(default_factory=_flatten_default)

    # Directory with questionnaire and mapping table overrides
    config_dir: Optional[str] = field(default_factory=lambda: os.getenv("DIVORCE_FORMS_CONFIG_DIR"))

    # "official" or "summary" when a request does not name a mode
    generation_mode: str = field(
        default_factory=lambda: os.getenv("DIVORCE_FORMS_GENERATION_MODE", GenerationMode.OFFICIAL.value)
    )


@dataclass
class PipelineResult:
    """Result of one generation request that does not raise."""

    success: bool
    document: Optional[GeneratedDocument] = None
    errors: List[str] = field(default_factory=list)
    retryable: bool = False
    processing_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineStats:
    """Statistics about pipeline execution."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_processing_time: float = 0.0
    total_processing_time: float = 0.0


def select_petition_type(responses: Mapping[str, Any]) -> str:
    """
    Pick the petition variant matching the answers.

    The with-children petition is chosen when ``has-children`` is a yes
    answer or ``number-of-children`` is positive.

    Returns:
        ``petition-with-children`` or ``petition-no-children``.
    """
    values = normalize_responses(responses)
    if is_truthy(values.get("has-children")):
        return PETITION_WITH_CHILDREN
    count = coerce_number(values.get("number-of-children"))
    if count is not None and count > 0:
        return PETITION_WITH_CHILDREN
    return PETITION_NO_CHILDREN


REQUESTABLE_MODES = (GenerationMode.OFFICIAL, GenerationMode.SUMMARY)


def parse_generation_mode(mode: Union[GenerationMode, str]) -> GenerationMode:
    """
    Read a requested generation mode.

    Raises:
        DocumentGenerationError: If the mode is not ``official`` or ``summary``.
    """
    try:
        parsed = mode if isinstance(mode, GenerationMode) else GenerationMode(str(mode).strip().lower())
    except ValueError:
        parsed = None
    if parsed not in REQUESTABLE_MODES:
        raise DocumentGenerationError(
            message=f"Unknown generation mode '{mode}'",
            details={"supported_modes": [m.value for m in REQUESTABLE_MODES]},
            retryable=False
        )
    return parsed


class DocumentGenerationPipeline:
    """
    Generates official, summary and freeform documents from response snapshots.

    Official forms go through mapping, derived fields, aggregates, template
    filling and finalizing. Summaries compose a readable overview of the
    same values. Document types without an official template are composed
    from scratch in every mode. Stored answers are never touched.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        registry: Optional[FieldMappingRegistry] = None,
        template_source: Optional[TemplateSource] = None,
        filler: Optional[PdfFormFiller] = None,
        composer: Optional[SettlementAgreementComposer] = None,
        clock: Optional[Callable[[], datetime]] = None,
        summaries: Optional[Mapping[str, SummaryComposer]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration.
            registry: Mapping registry (default registry if not provided).
            template_source: Source of template bytes (file system if not provided).
            filler: PDF form filler (created if not provided).
            composer: Settlement agreement composer (created if not provided).
            clock: Returns the generation timestamp when none is passed.
            summaries: Summary composers keyed by canonical document type.
        """
        self.config = config or PipelineConfig()
        self.stats = PipelineStats()
        self.registry = registry or default_registry
        self.template_source = template_source or FileSystemTemplateSource(
            self.config.template_dir, registry=self.registry
        )
        self.filler = filler or PdfFormFiller()
        self.composer = composer or SettlementAgreementComposer()
        self.summaries: Dict[str, SummaryComposer] = dict(
            default_summaries() if summaries is None else summaries
        )
        try:
            self.default_mode = parse_generation_mode(self.config.generation_mode)
        except DocumentGenerationError as e:
            raise ConfigurationError(f"Invalid default generation mode: {e.message}") from e
        self._clock = clock or datetime.now

    def resolve_document_type(self, document_type: str, responses: Mapping[str, Any]) -> str:
        """Resolve aliases; a bare ``petition`` picks its variant from the answers."""
        if document_type == "petition":
            return select_petition_type(responses)
        return self.registry.canonical_type(document_type)

    def generate(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: Optional[datetime] = None,
        flatten: Optional[bool] = None,
        mode: Optional[Union[GenerationMode, str]] = None
    ) -> GeneratedDocument:
        """
        Generate one document.

        Args:
            document_type: Canonical document type or alias.
            responses: Response snapshot.
            generated_at: Generation timestamp; the clock is read when None.
            flatten: Override the configured flattening for official forms.
            mode: ``official`` or ``summary``; the configured mode when None.
                Ignored for document types without an official form.

        Returns:
            The finalized document.

        Raises:
            UnsupportedDocumentTypeError: If the type has no table or composer,
                or no summary when a summary is requested.
            DocumentGenerationError: If any step of the generation fails, or
                the mode is unknown.
        """
        start_time = time.time()
        success = False
        canonical = self.resolve_document_type(document_type, responses)
        generated_at = generated_at or self._clock()
        flatten = self.config.flatten if flatten is None else flatten

        try:
            mode = self.default_mode if mode is None else parse_generation_mode(mode)
            logger.info(f"Generating '{canonical}' ({mode.value})")
            if self.registry.is_freeform(canonical):
                document = self._compose(canonical, responses, generated_at)
            elif mode is GenerationMode.SUMMARY:
                document = self._summarize(canonical, responses, generated_at)
            else:
                document = self._fill(canonical, responses, generated_at, flatten)
            success = True
            logger.info(
                f"Generated '{canonical}' ({document.size} bytes) "
                f"in {time.time() - start_time:.2f}s"
            )
            return document

        except (UnsupportedDocumentTypeError, DocumentGenerationError):
            raise

        except TemplateCorruptedError as e:
            logger.error(f"Template for '{canonical}' is corrupted: {e.message}")
            raise DocumentGenerationError(
                message=f"Template is not a readable PDF: {e.message}",
                document_type=canonical,
                details={"path": e.path},
                retryable=False
            ) from e

        except TemplateFetchError as e:
            logger.error(f"Template for '{canonical}' unavailable: {e.message}")
            raise DocumentGenerationError(
                message=f"Template unavailable: {e.message}",
                document_type=canonical,
                details={"path": e.path}
            ) from e

        except Exception as e:
            logger.exception(f"Generation of '{canonical}' failed")
            raise DocumentGenerationError(
                message=f"Document generation failed: {str(e)}",
                document_type=canonical,
                details={"original_error": str(e)}
            ) from e

        finally:
            self._update_stats(success, time.time() - start_time)

    def process(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: Optional[datetime] = None,
        flatten: Optional[bool] = None,
        mode: Optional[Union[GenerationMode, str]] = None
    ) -> PipelineResult:
        """
        Generate one document, reporting failures in the result instead of raising.

        Returns:
            PipelineResult with the document on success, errors otherwise.
        """
        start_time = time.time()
        result = PipelineResult(success=False)
        try:
            result.document = self.generate(document_type, responses, generated_at, flatten, mode)
            result.success = True
            result.metadata = result.document.to_dict()
        except DocumentGenerationError as e:
            result.errors.append(e.message)
            result.retryable = e.retryable
        except DivorceFormsError as e:
            result.errors.append(e.message)
        finally:
            result.processing_time = time.time() - start_time
        return result

    # ========================================================================
    # Steps
    # ========================================================================

    def map_fields(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: datetime
    ) -> Dict[str, str]:
        """
        Compute every destination value for an official form.

        Mapped values come first, then derived fields, then aggregates, so
        totals always reflect the answers rather than stale mapped values.

        Raises:
            UnsupportedDocumentTypeError: If no table is registered.
        """
        table = self.registry.resolve_table(document_type)
        values = normalize_responses(responses)

        field_values = apply_mapping(table, values)
        field_values.update(compute_derived_fields(table.document_type, values, generated_at))

        spec = AGGREGATE_SPECS.get(table.document_type)
        if spec is not None:
            field_values.update(format_aggregates(compute_aggregates(values, spec)))

        logger.debug(f"Prepared {len(field_values)} values for '{table.document_type}'")
        return field_values

    def _fill(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: datetime,
        flatten: bool
    ) -> GeneratedDocument:
        table = self.registry.resolve_table(document_type)
        field_values = self.map_fields(document_type, responses, generated_at)
        field_kinds = {entry.destination_field: entry.field_kind for entry in table}

        template = self.template_source.fetch(document_type)
        filled = self.filler.fill_template(template, field_values, field_kinds)
        content = finalize(filled, flatten=flatten)

        return GeneratedDocument(
            document_type=document_type,
            content=content,
            generated_at=generated_at,
            mode=GenerationMode.OFFICIAL,
            filled_fields=tuple(filled.report.filled_fields),
            missing_fields=tuple(filled.report.missing_fields),
            metadata={"flattened": flatten},
        )

    def _compose(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: datetime
    ) -> GeneratedDocument:
        composed = self.composer.build(responses, generated_at)
        content = composed.render()
        return GeneratedDocument(
            document_type=document_type,
            content=content,
            generated_at=generated_at,
            mode=GenerationMode.FREEFORM,
            metadata={"pages": composed.page_count},
        )

    def _summarize(
        self,
        document_type: str,
        responses: Mapping[str, Any],
        generated_at: datetime
    ) -> GeneratedDocument:
        summary = self.summaries.get(document_type)
        if summary is None:
            raise UnsupportedDocumentTypeError(
                message=f"No summary available for '{document_type}'",
                document_type=document_type,
                details={"supported_types": list(self.summaries)}
            )
        composed = summary.build(responses, generated_at)
        return GeneratedDocument(
            document_type=document_type,
            content=composed.render(),
            generated_at=generated_at,
            mode=GenerationMode.SUMMARY,
            metadata={"pages": composed.page_count},
        )

    def _update_stats(self, success: bool, processing_time: float) -> None:
        """Update pipeline statistics."""
        self.stats.total_executions += 1

        if success:
            self.stats.successful_executions += 1
        else:
            self.stats.failed_executions += 1

        self.stats.total_processing_time += processing_time
        self.stats.average_processing_time = (
            self.stats.total_processing_time / self.stats.total_executions
        )

    def get_stats(self) -> PipelineStats:
        """Get pipeline execution statistics."""
        return self.stats
