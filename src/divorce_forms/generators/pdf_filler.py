"""Official template filling.

Writes destination values into the named fields of an externally authored
fillable PDF. Each value is written once, the way its declared field kind
says: a text write or a button-state write. Fields that the template does
not contain are logged and reported, never fatal, because official
templates drift between versions.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import ArrayObject, NameObject, TextStringObject
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..errors import TemplateCorruptedError
from ..mappings.transforms import is_truthy
from ..models.enums import FieldKind

logger = logging.getLogger(__name__)

OVERLAY_FONT = "Helvetica"
MAX_FONT_SIZE = 10.0
MIN_FONT_SIZE = 6.0

# Field flag bits (PDF 32000-1, table 226)
_FLAG_RADIO = 1 << 15
_FLAG_PUSHBUTTON = 1 << 16


# ============================================================================
# Annotation helpers
# ============================================================================

def _field_object(annot):
    """Get the field dictionary a widget belongs to."""
    if "/T" in annot:
        return annot
    parent = annot.get("/Parent")
    return parent.get_object() if parent is not None else annot


def _inherited(annot, key: str):
    """Read a field attribute, walking up the parent chain."""
    node = annot
    while node is not None:
        value = node.get(key)
        if value is not None:
            return value
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return None


def _qualified_name(annot) -> str:
    """Build the fully qualified field name of a widget."""
    parts = []
    node = annot
    while node is not None:
        title = node.get("/T")
        if title:
            parts.insert(0, str(title))
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return ".".join(parts)


def _appearance_states(annot) -> List[str]:
    """Get the appearance state names of a button widget."""
    ap = annot.get("/AP")
    if ap is None:
        return []
    normal = ap.get_object().get("/N")
    if normal is None:
        return []
    normal = normal.get_object()
    return [str(key) for key in normal.keys()] if hasattr(normal, "keys") else []


def _on_state(annot) -> str:
    """Find the 'on' state of a checkbox; ``/Yes`` when it cannot be read."""
    for state in _appearance_states(annot):
        if state != "/Off":
            return state
    return "/Yes"


def _kind_of(annot) -> Optional[FieldKind]:
    field_type = str(_inherited(annot, "/FT") or "")
    if field_type in ("/Tx", "/Ch"):
        return FieldKind.TEXT
    if field_type == "/Btn":
        flags = int(_inherited(annot, "/Ff") or 0)
        if flags & _FLAG_PUSHBUTTON:
            return None
        return FieldKind.RADIO if flags & _FLAG_RADIO else FieldKind.CHECKBOX
    return None


def _rect(annot) -> Tuple[float, float, float, float]:
    x1, y1, x2, y2 = (float(v) for v in annot.get("/Rect", [0, 0, 0, 0]))
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


def _read_pdf(pdf_bytes: bytes) -> PdfReader:
    try:
        return PdfReader(io.BytesIO(pdf_bytes))
    except PdfReadError as e:
        raise TemplateCorruptedError(
            message="Template is not a readable PDF",
            details={"original_error": str(e)}
        ) from e
    except Exception as e:
        raise TemplateCorruptedError(
            message=f"Failed to open template: {str(e)}",
            details={"original_error": str(e)}
        ) from e


@dataclass
class Widget:
    """A widget annotation located in the writer's pages."""
    page_index: int
    annot: object
    name: str


def _index_widgets(writer: PdfWriter) -> Dict[str, List[Widget]]:
    """Index widgets by qualified name and by short name."""
    index: Dict[str, List[Widget]] = {}
    for page_index, page in enumerate(writer.pages):
        if "/Annots" not in page:
            continue
        for annot_ref in page["/Annots"]:
            annot = annot_ref.get_object()
            if annot.get("/Subtype") != "/Widget":
                continue
            qualified = _qualified_name(annot)
            if not qualified:
                continue
            widget = Widget(page_index=page_index, annot=annot, name=qualified)
            index.setdefault(qualified, []).append(widget)
            short = str(_field_object(annot).get("/T", ""))
            if short and short != qualified:
                index.setdefault(short, []).append(widget)
    return index


def list_template_fields(template_bytes: bytes) -> Dict[str, FieldKind]:
    """
    List the fillable fields of a template.

    Useful when authoring or repairing a mapping table against a new
    template version.

    Args:
        template_bytes: Raw template bytes.

    Returns:
        Mapping of qualified field name to field kind, in page order.

    Raises:
        TemplateCorruptedError: If the bytes are not a readable PDF.
    """
    reader = _read_pdf(template_bytes)
    fields: Dict[str, FieldKind] = {}
    for page in reader.pages:
        if "/Annots" not in page:
            continue
        for annot_ref in page["/Annots"]:
            annot = annot_ref.get_object()
            if annot.get("/Subtype") != "/Widget":
                continue
            name = _qualified_name(annot)
            kind = _kind_of(annot)
            if name and kind is not None and name not in fields:
                fields[name] = kind
    return fields


# ============================================================================
# Filling
# ============================================================================

@dataclass
class Placement:
    """A value to burn into page content when flattening."""
    page_index: int
    rect: Tuple[float, float, float, float]
    text: str


@dataclass
class FillReport:
    """Outcome of writing values into a template."""
    filled_fields: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.filled_fields is None:
            self.filled_fields = []
        if self.missing_fields is None:
            self.missing_fields = []


@dataclass
class FilledDocument:
    """A filled, not yet finalized, template."""
    writer: PdfWriter
    report: FillReport
    placements: List[Placement] = field(default_factory=list)
    finalized: bool = False


class PdfFormFiller:
    """Fills AcroForm templates with destination values."""

    def fill_template(
        self,
        template_bytes: bytes,
        field_values: Mapping[str, str],
        field_kinds: Optional[Mapping[str, FieldKind]] = None
    ) -> FilledDocument:
        """
        Write values into a template's named fields.

        Args:
            template_bytes: Raw bytes of the fillable template.
            field_values: Destination field name to value, in write order.
            field_kinds: Declared kind per destination field. Undeclared
                fields are written as text.

        Returns:
            The filled document and a report of filled and missing fields.

        Raises:
            TemplateCorruptedError: If the template is not a readable PDF.
        """
        reader = _read_pdf(template_bytes)
        writer = PdfWriter(clone_from=reader)

        kinds = field_kinds or {}
        widgets = _index_widgets(writer)
        filled = FilledDocument(writer=writer, report=FillReport())

        for name, value in field_values.items():
            targets = widgets.get(name)
            if not targets:
                logger.warning(f"Field '{name}' not found in template; skipping")
                filled.report.missing_fields.append(name)
                continue

            kind = kinds.get(name, FieldKind.TEXT)
            if kind is FieldKind.CHECKBOX:
                self._write_checkbox(targets, value, filled)
            elif kind is FieldKind.RADIO:
                self._write_radio(targets, value, filled)
            else:
                self._write_text(targets, value, filled)
            filled.report.filled_fields.append(name)

        logger.info(
            f"Filled {len(filled.report.filled_fields)} fields, "
            f"{len(filled.report.missing_fields)} missing from template"
        )
        return filled

    def _write_text(self, targets: List[Widget], value: str, filled: FilledDocument) -> None:
        for widget in targets:
            _field_object(widget.annot).update({
                NameObject("/V"): TextStringObject(value)
            })
            if "/AP" in widget.annot:
                del widget.annot["/AP"]
            filled.placements.append(Placement(widget.page_index, _rect(widget.annot), value))

    def _write_checkbox(self, targets: List[Widget], value: str, filled: FilledDocument) -> None:
        checked = is_truthy(value)
        for widget in targets:
            state = _on_state(widget.annot) if checked else "/Off"
            _field_object(widget.annot).update({NameObject("/V"): NameObject(state)})
            widget.annot.update({NameObject("/AS"): NameObject(state)})
            if checked:
                filled.placements.append(Placement(widget.page_index, _rect(widget.annot), "X"))

    def _write_radio(self, targets: List[Widget], value: str, filled: FilledDocument) -> None:
        wanted = "/" + str(value).lstrip("/")
        selected = False
        for widget in targets:
            if wanted in _appearance_states(widget.annot):
                widget.annot.update({NameObject("/AS"): NameObject(wanted)})
                filled.placements.append(Placement(widget.page_index, _rect(widget.annot), "X"))
                selected = True
            else:
                widget.annot.update({NameObject("/AS"): NameObject("/Off")})
        if selected:
            _field_object(targets[0].annot).update({NameObject("/V"): NameObject(wanted)})
        else:
            logger.warning(f"Radio group '{targets[0].name}' has no option '{value}'")


# ============================================================================
# Finalizing
# ============================================================================

def _fit_font_size(text: str, width: float, height: float) -> float:
    size = max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, height * 0.7))
    longest = max(text.split("\n"), key=len) if text else ""
    while size > MIN_FONT_SIZE and stringWidth(longest, OVERLAY_FONT, size) > width - 4:
        size -= 0.5
    return size


def _draw_placement(c: canvas.Canvas, placement: Placement) -> None:
    x1, y1, x2, y2 = placement.rect
    width, height = x2 - x1, y2 - y1
    lines = placement.text.split("\n")
    size = _fit_font_size(placement.text, width, height / max(len(lines), 1))
    c.setFont(OVERLAY_FONT, size)
    if len(lines) == 1:
        c.drawString(x1 + 2, y1 + max((height - size) / 2, 1), lines[0])
        return
    y = y2 - size - 1
    for line in lines:
        c.drawString(x1 + 2, y, line)
        y -= size + 2


def _overlay(filled: FilledDocument) -> Optional[PdfReader]:
    """Render all placements onto one overlay page per document page."""
    if not filled.placements:
        return None
    by_page: Dict[int, List[Placement]] = {}
    for placement in filled.placements:
        by_page.setdefault(placement.page_index, []).append(placement)

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, invariant=1)
    for page_index, page in enumerate(filled.writer.pages):
        box = page.mediabox
        c.setPageSize((float(box.width), float(box.height)))
        for placement in by_page.get(page_index, []):
            _draw_placement(c, placement)
        c.showPage()
    c.save()
    return PdfReader(io.BytesIO(buffer.getvalue()))


def _remove_widgets(writer: PdfWriter) -> None:
    for page in writer.pages:
        if "/Annots" not in page:
            continue
        kept = [
            ref for ref in page["/Annots"]
            if ref.get_object().get("/Subtype") != "/Widget"
        ]
        if kept:
            page[NameObject("/Annots")] = ArrayObject(kept)
        else:
            del page["/Annots"]
    if "/AcroForm" in writer.root_object:
        del writer.root_object["/AcroForm"]


def finalize(filled: FilledDocument, flatten: bool = True) -> bytes:
    """
    Finalize a filled template into immutable bytes.

    With ``flatten`` the written values are drawn onto the page content and
    the form fields are removed, so nothing stays editable. Without it the
    fields stay editable and viewers are asked to regenerate appearances.
    Identical inputs give byte-identical output.

    Args:
        filled: Result of ``PdfFormFiller.fill_template``.
        flatten: Burn values into the pages.

    Returns:
        The finalized PDF bytes.
    """
    if filled.finalized:
        raise ValueError("Document has already been finalized")
    writer = filled.writer

    if flatten:
        overlay = _overlay(filled)
        if overlay is not None:
            for page_index, page in enumerate(writer.pages):
                page.merge_page(overlay.pages[page_index])
        _remove_widgets(writer)
    elif "/AcroForm" in writer.root_object:
        writer.set_need_appearances_writer(True)

    output = io.BytesIO()
    writer.write(output)
    filled.finalized = True
    return output.getvalue()
