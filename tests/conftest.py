"""Shared fixtures: small questionnaires and fillable PDF templates."""

import io
from typing import Dict, Iterable, Optional, Sequence

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from divorce_forms.models import (
    Condition,
    ConditionEffect,
    ConditionOperator,
    NumberQuestion,
    Schema,
    Section,
    YesNoQuestion,
)


def build_fillable_pdf(
    text_fields: Iterable[str] = (),
    checkboxes: Iterable[str] = (),
    radios: Optional[Dict[str, Sequence[str]]] = None,
    pages: int = 1,
    label_font: str = "Helvetica",
) -> bytes:
    """Build an AcroForm template; every field is placed on the first page."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter, invariant=1, initialFontName=label_font)
    form = c.acroForm
    y = 720
    for name in text_fields:
        c.drawString(72, y + 4, name)
        form.textfield(name=name, x=200, y=y, width=300, height=18)
        y -= 28
    for name in checkboxes:
        c.drawString(72, y + 2, name)
        form.checkbox(name=name, x=200, y=y, size=14, buttonStyle="check")
        y -= 28
    for name, values in (radios or {}).items():
        c.drawString(72, y + 2, name)
        for i, value in enumerate(values):
            form.radio(name=name, value=value, x=200 + i * 40, y=y, size=14, selected=False)
        y -= 28
    c.showPage()
    for _ in range(pages - 1):
        c.drawString(72, 720, "continued")
        c.showPage()
    c.save()
    return buffer.getvalue()


def gated_schema() -> Schema:
    """Q1 is an optional yes/no; Q2 is a required number shown only when Q1 is yes."""
    q1 = YesNoQuestion(id="q1", label="Q1")
    q2 = NumberQuestion(
        id="q2",
        label="Q2",
        required=True,
        conditions=(
            Condition("q1", ConditionOperator.EQUALS, "yes", ConditionEffect.SHOW),
        ),
    )
    return Schema(
        id="gated",
        name="Gated",
        sections=(Section(id="main", title="Main", questions=(q1, q2)),),
    )


@pytest.fixture
def schema():
    """Schema with one gated question."""
    return gated_schema()


@pytest.fixture
def fillable_pdf():
    """Factory for fillable templates."""
    return build_fillable_pdf
