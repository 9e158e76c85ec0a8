# marginate/styling/composer.py
from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Type

from pypdf import PdfReader, PdfWriter
from pypdf._page import PageObject
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

from marginate.errors import (
    BackgroundDecodeError,
    DecodeError,
    ForegroundDecodeError,
    NoPages,
)
from marginate.styling.page_embedder import EmbeddedPage, PageEmbedder
from marginate.styling.watermark import WatermarkLayer

logger = logging.getLogger(__name__)

DEFAULT_MARGIN = 20.0

# XObject names used in every output page's resources
BACKGROUND_NAME = "/MgBackground"
FOREGROUND_NAME = "/MgForeground"
WATERMARK_NAME = "/MgWatermark"


@dataclass(frozen=True)
class ComposeOptions:
    """
    margin:            inset kept free on each side of the foreground.
    page_limit:        max foreground pages to use; None or math.inf = all.
    include_watermark: burn in the attribution text + link annotations.
    """

    margin: float = DEFAULT_MARGIN
    page_limit: Optional[float] = None
    include_watermark: bool = False


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    width: float
    height: float
    scale: float


def fit_centered(
    page_w: float,
    page_h: float,
    content_w: float,
    content_h: float,
    margin: float = DEFAULT_MARGIN,
) -> Placement:
    """
    Uniform scale so the content fits inside the page minus `margin` on each
    side, then centered on the FULL page.
    """
    if content_w <= 0 or content_h <= 0:
        raise ValueError(f"Foreground page has no area ({content_w} x {content_h})")

    avail_w = page_w - 2 * margin
    avail_h = page_h - 2 * margin
    if avail_w <= 0 or avail_h <= 0:
        raise ValueError(f"Margin {margin} leaves no room on a {page_w} x {page_h} page")

    scale = min(avail_w / content_w, avail_h / content_h)
    w = content_w * scale
    h = content_h * scale
    return Placement(x=(page_w - w) / 2, y=(page_h - h) / 2, width=w, height=h, scale=scale)


def selected_count(total: int, page_limit: Optional[float]) -> int:
    if page_limit is None or page_limit == math.inf:
        return total
    if page_limit < 0:
        raise ValueError(f"page_limit must be >= 0, got {page_limit}")
    return min(int(page_limit), total)


def _num(v: float) -> str:
    s = f"{v:.4f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def draw_form_ops(name: str, form: EmbeddedPage, x: float, y: float, width: float, height: float) -> str:
    """Content-stream operators painting `form` into the box (x, y, width, height)."""
    sx = width / form.width
    sy = height / form.height
    tx = x - form.bbox[0] * sx
    ty = y - form.bbox[1] * sy
    return f"q {_num(sx)} 0 0 {_num(sy)} {_num(tx)} {_num(ty)} cm {name} Do Q\n"


def annotate_page(writer: PdfWriter, page: PageObject, watermark: WatermarkLayer) -> None:
    # add_annotation registers each link and appends to /Annots (created if missing)
    for annotation in watermark.link_annotations():
        writer.add_annotation(page, annotation)


def _decode(data: bytes, error_cls: Type[DecodeError]) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(data))
        # page tree is parsed lazily; force it here so failures are attributed
        len(reader.pages)
    except Exception as e:
        raise error_cls(f"{type(e).__name__}: {e}") from e
    return reader


class MarginComposer:
    """
    Builds the output document:
      - page 1 of the background is embedded once and drawn full-bleed on
        every output page
      - each selected foreground page is scaled to fit inside the margin and
        centered on top
      - optional watermark text + clickable links in the bottom-right corner
    """

    def __init__(self, options: ComposeOptions | None = None):
        self.options = options or ComposeOptions()

    def compose(self, background_bytes: bytes, foreground_bytes: bytes) -> bytes:
        bg_reader = _decode(background_bytes, BackgroundDecodeError)
        if len(bg_reader.pages) == 0:
            raise NoPages()
        bg_page = bg_reader.pages[0]

        fg_reader = _decode(foreground_bytes, ForegroundDecodeError)
        fg_pages = list(fg_reader.pages)

        writer = PdfWriter()
        embedder = PageEmbedder(writer)

        background = embedder.embed_page(bg_page)
        page_w, page_h = background.width, background.height

        watermark: WatermarkLayer | None = None
        watermark_form: EmbeddedPage | None = None
        if self.options.include_watermark:
            watermark = WatermarkLayer(page_w, page_h)
            watermark_form = embedder.embed_page(watermark.render_overlay())

        count = selected_count(len(fg_pages), self.options.page_limit)
        foregrounds = embedder.embed_pages(fg_pages[:count])

        for number, fg in enumerate(foregrounds, start=1):
            if fg.width <= 0 or fg.height <= 0:
                raise ForegroundDecodeError(f"page {number} has no area ({fg.width} x {fg.height})")
            page = writer.add_blank_page(width=page_w, height=page_h)
            self._paint(writer, page, background, fg, watermark_form)
            if watermark is not None:
                annotate_page(writer, page, watermark)

        logger.debug(
            "compose: %d/%d foreground pages, %d forms embedded, watermark=%s",
            count,
            len(fg_pages),
            embedder.form_count,
            self.options.include_watermark,
        )

        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    def _paint(
        self,
        writer: PdfWriter,
        page: PageObject,
        background: EmbeddedPage,
        foreground: EmbeddedPage,
        watermark_form: EmbeddedPage | None,
    ) -> None:
        page_w, page_h = background.width, background.height
        spot = fit_centered(page_w, page_h, foreground.width, foreground.height, self.options.margin)

        ops: List[str] = [
            draw_form_ops(BACKGROUND_NAME, background, 0, 0, page_w, page_h),
            draw_form_ops(FOREGROUND_NAME, foreground, spot.x, spot.y, spot.width, spot.height),
        ]
        xobjects = DictionaryObject(
            {
                NameObject(BACKGROUND_NAME): background.ref,
                NameObject(FOREGROUND_NAME): foreground.ref,
            }
        )
        if watermark_form is not None:
            ops.append(draw_form_ops(WATERMARK_NAME, watermark_form, 0, 0, page_w, page_h))
            xobjects[NameObject(WATERMARK_NAME)] = watermark_form.ref

        page[NameObject("/Resources")] = DictionaryObject({NameObject("/XObject"): xobjects})

        content = DecodedStreamObject()
        content.set_data("".join(ops).encode("ascii"))
        page[NameObject("/Contents")] = writer._add_object(content)


def merge_documents(
    background_bytes: bytes,
    foreground_bytes: bytes,
    page_limit: Optional[float] = None,
    include_watermark: bool = False,
    *,
    margin: float = DEFAULT_MARGIN,
) -> bytes:
    composer = MarginComposer(
        ComposeOptions(margin=margin, page_limit=page_limit, include_watermark=include_watermark)
    )
    return composer.compose(background_bytes, foreground_bytes)
