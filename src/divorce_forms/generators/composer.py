"""Freeform document composer.

Builds a paginated document from scratch for document types that have no
official fillable template: numbered paragraphs, word wrapping, signature
blocks and a disclaimer footer. Every drawn string is also recorded per
page so a composed document can be inspected without parsing the PDF.
"""

import io
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

BLANK = "_______________"


@dataclass(frozen=True)
class PageLayout:
    """
    Page geometry and typography for composed documents.

    Args:
        char_budget: When set, lines are wrapped to this many characters
            instead of ``wrap_width`` points.
    """
    width: float = 612
    height: float = 792
    font: str = "Times-Roman"
    bold_font: str = "Times-Bold"
    italic_font: str = "Times-Italic"
    font_size: float = 11
    line_height: float = 14
    start_y: float = 740
    bottom_margin: float = 80
    left_margin: float = 50
    number_x: float = 50
    text_x: float = 70
    wrap_width: float = 480
    char_budget: Optional[int] = None


def wrap_line(text: str, budget: float, measure: Callable[[str], float] = len) -> List[str]:
    """
    Greedily pack words into lines no wider than a budget.

    Words are added to the current line until the next word would push it
    past the budget. A single word wider than the budget is emitted on a
    line of its own rather than split.

    Args:
        text: One content line.
        budget: Maximum line width, in the units ``measure`` returns.
        measure: Width function; character count by default.

    Returns:
        The wrapped lines; empty for blank text.
    """
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > budget:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class FreeformComposer:
    """
    Cursor-based page writer on a reportlab canvas.

    The cursor moves down the page as text is written. A new page starts
    whenever the cursor falls below the bottom margin; the check runs
    before every written line, so long paragraphs break across pages
    instead of running off the bottom.

    Args:
        layout: Page geometry; US Letter with Times at 11pt by default.
        title: Optional document title stored in the PDF metadata.
    """

    def __init__(self, layout: Optional[PageLayout] = None, title: Optional[str] = None):
        self.layout = layout or PageLayout()
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(self.layout.width, self.layout.height),
            invariant=1
        )
        if title:
            self._canvas.setTitle(title)
        self.y = self.layout.start_y
        self.paragraph_number = 1
        self.pages: List[List[str]] = [[]]
        self._content: Optional[bytes] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def lines(self) -> List[str]:
        """Every recorded string, in drawing order across pages."""
        return [line for page in self.pages for line in page]

    # ========================================================================
    # Cursor
    # ========================================================================

    def new_page(self) -> None:
        self._canvas.showPage()
        self.y = self.layout.start_y
        self.pages.append([])

    def check_page(self) -> None:
        """Start a new page if the cursor is below the bottom margin."""
        if self.y < self.layout.bottom_margin:
            self.new_page()

    def advance(self, amount: Optional[float] = None) -> None:
        self.y -= self.layout.line_height if amount is None else amount

    def measure(self, text: str, font: Optional[str] = None, size: Optional[float] = None) -> float:
        return stringWidth(text, font or self.layout.font, size or self.layout.font_size)

    def _wrap(self, text: str) -> List[str]:
        if self.layout.char_budget:
            return wrap_line(text, self.layout.char_budget)
        return wrap_line(text, self.layout.wrap_width, self.measure)

    # ========================================================================
    # Drawing primitives
    # ========================================================================

    def text(
        self,
        text: str,
        x: float,
        font: Optional[str] = None,
        size: Optional[float] = None,
        gray: float = 0.0,
        centered: bool = False
    ) -> float:
        """
        Draw one string at the cursor's baseline.

        Returns:
            The x coordinate just past the drawn text.
        """
        if self._content is not None:
            raise ValueError("Document has already been rendered")
        font = font or self.layout.font
        size = size or self.layout.font_size
        width = self.measure(text, font, size)
        if centered:
            x = (self.layout.width - width) / 2
        self._canvas.setFillGray(gray)
        self._canvas.setFont(font, size)
        self._canvas.drawString(x, self.y, text)
        self.pages[-1].append(text)
        return x + width

    def rule(self, x1: float, x2: float, y: float, gray: float = 0.0, thickness: float = 0.5) -> None:
        self._canvas.setStrokeGray(gray)
        self._canvas.setLineWidth(thickness)
        self._canvas.line(x1, y, x2, y)

    def paragraph(self, title: str, lines: Sequence[str]) -> List[str]:
        """
        Write a numbered paragraph.

        The number and the upper-cased title are set in bold. Each content
        line is wrapped, and a blank content line leaves one empty line.

        Args:
            title: Paragraph heading.
            lines: Ordered content lines.

        Returns:
            The wrapped lines actually written.
        """
        layout = self.layout
        self.check_page()
        self.text(f"{self.paragraph_number}.", layout.number_x, font=layout.bold_font)
        self.text(title.upper(), layout.text_x, font=layout.bold_font)
        self.advance(layout.line_height + 5)

        written = self._write_lines(lines, layout.text_x)

        self.advance(10)
        self.paragraph_number += 1
        return written

    def section(self, title: str, lines: Sequence[str]) -> List[str]:
        """
        Write an unnumbered section: an upper-cased bold heading at the
        left margin, then the wrapped content lines.

        Returns:
            The wrapped lines actually written.
        """
        layout = self.layout
        self.check_page()
        self.text(title.upper(), layout.left_margin, font=layout.bold_font, size=layout.font_size + 1)
        self.advance(layout.line_height + 4)
        written = self._write_lines(lines, layout.text_x)
        self.advance(12)
        return written

    def _write_lines(self, lines: Sequence[str], x: float) -> List[str]:
        written: List[str] = []
        for line in lines:
            wrapped = self._wrap(line)
            if not wrapped:
                self.advance()
                continue
            for piece in wrapped:
                self.check_page()
                self.text(piece, x)
                self.advance()
                written.append(piece)
        return written

    def caption(self, name: str, role: str) -> None:
        """Draw an upper-cased bold party name followed by its role."""
        end = self.text(name.upper(), self.layout.left_margin, font=self.layout.bold_font)
        self.text(f", {role}", end + 5)

    def signature_block(self, name: str, role: str, gap: float = 20) -> None:
        """Draw a signature line with the signer's name, role and a date blank."""
        layout = self.layout
        self.check_page()
        self.rule(layout.left_margin, layout.left_margin + 200, self.y + 5)
        self.advance()
        self.text(name, layout.left_margin)
        self.advance()
        self.text(role, layout.left_margin, font=layout.italic_font)
        self.advance()
        self.text(f"Date: {BLANK}", layout.left_margin)
        self.advance(layout.line_height + gap)

    def disclaimer_footer(self, lines: Sequence[str]) -> None:
        """Draw small grey footer lines under a rule at the bottom of the page."""
        layout = self.layout
        self.check_page()
        self.rule(layout.left_margin, layout.width - layout.left_margin, 70, gray=0.7)
        self.y = 55
        for line in lines:
            self.text(line, layout.left_margin, size=8, gray=0.5)
            self.advance(10)

    def render(self) -> bytes:
        """
        Finish the document.

        Returns:
            The PDF bytes; repeated calls return the same bytes.
        """
        if self._content is None:
            self._canvas.showPage()
            self._canvas.save()
            self._content = self._buffer.getvalue()
            logger.debug(f"Rendered {self.page_count} page(s), {len(self._content)} bytes")
        return self._content
