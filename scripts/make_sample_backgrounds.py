# scripts/make_sample_backgrounds.py
from __future__ import annotations

from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from marginate.config import get_settings
from marginate.styling.backgrounds import PAPER_SIZES, background_locator

# Width of the note band on each side of an A4-high page, per size token
BAND_W = {"a3": 150.0, "a2": 250.0, "a1": 400.0}

YELLOW = colors.HexColor("#FFF4B8")
GRID = colors.HexColor("#E3D27A")
SQUARE = 5 * mm


def draw_squares_band(c: canvas.Canvas, x0: float, x1: float, h: float) -> None:
    c.setFillColor(YELLOW)
    c.rect(x0, 0, x1 - x0, h, stroke=0, fill=1)

    c.setStrokeColor(GRID)
    c.setLineWidth(0.4)
    x = x0
    while x <= x1:
        c.line(x, 0, x, h)
        x += SQUARE
    y = 0.0
    while y <= h:
        c.line(x0, y, x1, y)
        y += SQUARE


def make_background(out: Path, band: float) -> None:
    content_w, h = A4
    w = content_w + 2 * band

    c = canvas.Canvas(str(out), pagesize=(w, h))
    draw_squares_band(c, 0, band, h)
    draw_squares_band(c, w - band, w, h)
    c.save()


def main():
    settings = get_settings()
    root = Path(settings.asset_root)

    for size in PAPER_SIZES:
        rel = background_locator(size, "yellow", "squares", base=settings.background_base)
        out = root / rel
        out.parent.mkdir(parents=True, exist_ok=True)
        make_background(out, BAND_W[size])
        print(f"[OK] wrote {out}")


if __name__ == "__main__":
    main()
