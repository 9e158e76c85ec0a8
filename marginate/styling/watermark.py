# marginate/styling/watermark.py
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from pypdf import PdfReader
from pypdf._page import PageObject
from pypdf.annotations import Link
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

WATERMARK_LINES = (
    "Add margins to your documents using Marginate",
    "Download from the App Store or at marginate.emanuele.click",
)
WATERMARK_URL = "http://marginate.emanuele.click"

FONT_NAME = "Helvetica"
FONT_SIZE = 10
TEXT_GRAY = 0.5
RIGHT_INSET = 10
BOTTOM_Y = 10  # baseline of the lowest line
LINE_PITCH = 10
LINK_PAD = 2  # link box extends this far above the font size


@dataclass(frozen=True)
class WatermarkLine:
    text: str
    x: float
    y: float
    width: float
    url: str | None = WATERMARK_URL

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.x + self.width, self.y + FONT_SIZE + LINK_PAD)


def layout_watermark(
    page_width: float,
    lines: Sequence[str] = WATERMARK_LINES,
    url: str | None = WATERMARK_URL,
) -> List[WatermarkLine]:
    """
    Right-aligned at page_width - RIGHT_INSET, stacked bottom-up:
    the last line sits on BOTTOM_Y, earlier lines LINE_PITCH above it.
    Returned in the given (top-to-bottom) order.
    """
    out: List[WatermarkLine] = []
    n = len(lines)
    for i, text in enumerate(lines):
        w = stringWidth(text, FONT_NAME, FONT_SIZE)
        y = BOTTOM_Y + (n - 1 - i) * LINE_PITCH
        out.append(WatermarkLine(text=text, x=page_width - w - RIGHT_INSET, y=y, width=w, url=url))
    return out


class WatermarkLayer:
    """
    The watermark is identical on every output page (all pages share the
    background size), so its text is rendered once into a single overlay
    page and only the link annotations are created per page.
    """

    def __init__(
        self,
        page_width: float,
        page_height: float,
        lines: Sequence[str] = WATERMARK_LINES,
        url: str | None = WATERMARK_URL,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.lines = layout_watermark(page_width, lines, url)

    def render_overlay(self) -> PageObject:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(self.page_width, self.page_height))
        c.setFont(FONT_NAME, FONT_SIZE)
        c.setFillColorRGB(TEXT_GRAY, TEXT_GRAY, TEXT_GRAY)
        for line in self.lines:
            c.drawString(line.x, line.y, line.text)
        c.save()
        buf.seek(0)
        return PdfReader(buf).pages[0]

    def link_annotations(self) -> List[Link]:
        # fresh objects every call: each page needs its own annotation dicts
        return [Link(rect=line.rect, url=line.url) for line in self.lines if line.url]
