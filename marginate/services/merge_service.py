# marginate/services/merge_service.py
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from marginate.config import get_settings
from marginate.errors import MarginateError
from marginate.storage.source_fetcher import SourceFetcher, get_fetcher
from marginate.styling.composer import merge_documents

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeRequest:
    background_locator: str = ""
    background_bytes: Optional[bytes] = None
    foreground_locator: str = ""
    foreground_bytes: Optional[bytes] = None
    page_limit: Optional[float] = math.inf
    include_watermark: bool = False
    margin: Optional[float] = None


def _fetch_side(fetcher: SourceFetcher, side: str, locator: str, inline: Optional[bytes]) -> bytes:
    try:
        return fetcher.resolve_source(locator, inline)
    except MarginateError as e:
        logger.error("Error while fetching the %s PDF: %s", side.upper(), e)
        raise


def _margin(req: MergeRequest) -> float:
    return req.margin if req.margin is not None else get_settings().margin


def create_merged_pdf(req: MergeRequest, fetcher: SourceFetcher | None = None) -> bytes:
    fetcher = fetcher or get_fetcher()
    bg = _fetch_side(fetcher, "background", req.background_locator, req.background_bytes)
    fg = _fetch_side(fetcher, "foreground", req.foreground_locator, req.foreground_bytes)
    return merge_documents(bg, fg, req.page_limit, req.include_watermark, margin=_margin(req))


async def fetch_sources(req: MergeRequest, fetcher: SourceFetcher | None = None) -> Tuple[bytes, bytes]:
    """Both sources are independent, so they are fetched concurrently."""
    fetcher = fetcher or get_fetcher()
    bg, fg = await asyncio.gather(
        run_in_threadpool(_fetch_side, fetcher, "background", req.background_locator, req.background_bytes),
        run_in_threadpool(_fetch_side, fetcher, "foreground", req.foreground_locator, req.foreground_bytes),
    )
    return bg, fg


async def create_merged_pdf_async(req: MergeRequest, fetcher: SourceFetcher | None = None) -> bytes:
    bg, fg = await fetch_sources(req, fetcher)
    return await run_in_threadpool(
        merge_documents,
        bg,
        fg,
        req.page_limit,
        req.include_watermark,
        margin=_margin(req),
    )
