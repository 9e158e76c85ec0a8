from __future__ import annotations

import io
from typing import Sequence, Tuple

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject
from reportlab.pdfgen import canvas


def make_pdf(sizes: Sequence[Tuple[float, float]], label: str = "Page") -> bytes:
    """One page per size, each with a short text line so it has real content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=sizes[0])
    for i, (w, h) in enumerate(sizes):
        c.setPageSize((w, h))
        c.setFont("Helvetica", 12)
        c.drawString(10, h / 2, f"{label} {i + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_empty_pdf() -> bytes:
    buf = io.BytesIO()
    PdfWriter().write(buf)
    return buf.getvalue()


@pytest.fixture
def letter_background() -> bytes:
    return make_pdf([(612, 792)], label="Backdrop")


@pytest.fixture
def square_foreground() -> bytes:
    return make_pdf([(300, 300)], label="Foreground")


@pytest.fixture
def five_page_foreground() -> bytes:
    return make_pdf([(595, 842)] * 5, label="Foreground")


def make_flat_pdf() -> bytes:
    """A readable PDF whose only page has a zero-height MediaBox."""
    writer = PdfWriter(clone_from=PdfReader(io.BytesIO(make_pdf([(300, 300)]))))
    writer.pages[0].mediabox = RectangleObject((0, 0, 300, 0))
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()
