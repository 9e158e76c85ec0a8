# marginate/styling/page_embedder.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from pypdf import PdfWriter
from pypdf._page import PageObject
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedPage:
    """
    Handle to a source page registered in the output as a Form XObject.
    Draw it as many times as needed; the page data is stored once.
    """

    ref: IndirectObject
    bbox: Tuple[float, float, float, float]

    @property
    def width(self) -> float:
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]


class PageEmbedder:
    """
    Turns source pages into Form XObjects owned by one PdfWriter.

    Embedding is memoized per source page. Resources (fonts, images) are
    cloned through pypdf's clone map, so pages coming from the same reader
    share them instead of copying them per page.
    """

    def __init__(self, writer: PdfWriter):
        self.writer = writer
        self._embedded: Dict[int, Tuple[PageObject, EmbeddedPage]] = {}
        self.embed_calls = 0

    def embed_page(self, page: PageObject) -> EmbeddedPage:
        return self.embed_pages([page])[0]

    def embed_pages(self, pages: Sequence[PageObject]) -> List[EmbeddedPage]:
        self.embed_calls += 1
        out: List[EmbeddedPage] = []
        for page in pages:
            hit = self._embedded.get(id(page))
            if hit is None:
                # keep the page alive so its id() stays unique for this embedder
                hit = (page, self._make_form(page))
                self._embedded[id(page)] = hit
            out.append(hit[1])
        logger.debug("embed_pages: %d requested, %d forms in writer", len(pages), len(self._embedded))
        return out

    @property
    def form_count(self) -> int:
        return len(self._embedded)

    def _make_form(self, page: PageObject) -> EmbeddedPage:
        box = page.mediabox
        bbox = (float(box.left), float(box.bottom), float(box.right), float(box.top))

        contents = page.get_contents()
        data = contents.get_data() if contents is not None else b""

        form = DecodedStreamObject()
        form.set_data(data)
        form.update(
            {
                NameObject("/Type"): NameObject("/XObject"),
                NameObject("/Subtype"): NameObject("/Form"),
                NameObject("/FormType"): NumberObject(1),
                NameObject("/BBox"): ArrayObject([FloatObject(v) for v in bbox]),
                NameObject("/Resources"): self._clone_resources(page),
            }
        )
        ref = self.writer._add_object(form.flate_encode())
        return EmbeddedPage(ref=ref, bbox=bbox)

    def _clone_resources(self, page: PageObject):
        if "/Resources" not in page:
            return DictionaryObject()
        cloned = page["/Resources"].clone(self.writer)
        # an indirect resources dict was registered in the writer by clone()
        return getattr(cloned, "indirect_reference", None) or cloned
