# marginate/styling/backgrounds.py
from __future__ import annotations

from marginate.errors import UnavailableBackground

DEFAULT_BACKGROUND_BASE = "./pdf-backgrounds"

# Closed token sets. Reserved tokens are known but have no template yet.
PAPER_SIZES = ("a1", "a2", "a3")
MARGIN_COLORS = ("yellow",)
RESERVED_MARGIN_COLORS = ("white", "dark")
PAPER_STYLES = ("squares",)
RESERVED_PAPER_STYLES = ("lines", "plain", "cornell")

# Human labels for the size picker
PAPER_SIZE_LABELS = {"a1": "Huge", "a2": "Big", "a3": "Medium"}


def background_locator(
    paper_size: str,
    margin_color: str,
    paper_style: str,
    base: str = DEFAULT_BACKGROUND_BASE,
) -> str:
    """
    e.g. ("a2", "yellow", "squares") -> "./pdf-backgrounds/a2-yellow-squares.pdf"
    The PDF itself is served by the asset root (see SourceFetcher).
    """
    return f"{base}/{paper_size}-{margin_color}-{paper_style}.pdf"


def ensure_available(paper_size: str, margin_color: str, paper_style: str) -> None:
    if paper_size not in PAPER_SIZES:
        raise UnavailableBackground("paper_size", paper_size)
    if margin_color not in MARGIN_COLORS:
        raise UnavailableBackground("margin_color", margin_color)
    if paper_style not in PAPER_STYLES:
        raise UnavailableBackground("paper_style", paper_style)


def background_options() -> dict:
    return {
        "paper_sizes": [
            {"value": s, "label": PAPER_SIZE_LABELS[s], "available": True} for s in PAPER_SIZES
        ],
        "margin_colors": [{"value": c, "available": True} for c in MARGIN_COLORS]
        + [{"value": c, "available": False} for c in RESERVED_MARGIN_COLORS],
        "paper_styles": [{"value": s, "available": True} for s in PAPER_STYLES]
        + [{"value": s, "available": False} for s in RESERVED_PAPER_STYLES],
    }
