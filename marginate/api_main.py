# marginate/api_main.py
from __future__ import annotations

import base64
import binascii
import logging
import math
from typing import Literal, Optional

from fastapi import FastAPI, File, Form, Header, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from marginate.config import get_settings
from marginate.errors import (
    DecodeError,
    EmptyLocator,
    EmptyResult,
    FetchFailed,
    MarginateError,
    NoPages,
    UnavailableBackground,
)
from marginate.services.filenames import content_disposition, download_filename, source_name
from marginate.services.merge_service import MergeRequest, create_merged_pdf_async
from marginate.services.request_tracker import LatestRequestTracker
from marginate.storage.source_fetcher import get_fetcher
from marginate.styling.backgrounds import background_locator, background_options, ensure_available

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Marginate API")

# CORS for local frontend dev (React/Vite/etc.)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# latest preview generation per client, bounded to the most recent clients
_previews = LatestRequestTracker()


def _http_error(e: MarginateError) -> HTTPException:
    if isinstance(e, (EmptyLocator, UnavailableBackground)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (FetchFailed, EmptyResult)):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, (DecodeError, NoPages)):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=500, detail=f"{type(e).__name__}: {e}")


def _check_foreground_url(url: str) -> str:
    url = (url or "").strip()
    if url and not url.lower().startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="foreground_url must be an http(s) URL")
    return url


def _background_for(paper_size: str, margin_color: str, paper_style: str) -> str:
    try:
        ensure_available(paper_size, margin_color, paper_style)
    except UnavailableBackground as e:
        raise _http_error(e) from e
    return background_locator(paper_size, margin_color, paper_style, base=get_settings().background_base)


async def _merge(req: MergeRequest) -> bytes:
    try:
        return await create_merged_pdf_async(req, fetcher=get_fetcher())
    except MarginateError as e:
        raise _http_error(e) from e


def _pdf_response(pdf: bytes, filename: str, inline: bool) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename, inline=inline)},
    )


@app.get("/")
def root():
    return {"ok": True, "try": ["/docs", "/api/health", "/api/backgrounds"]}


@app.get("/api/health")
def health():
    return {"ok": True}


@app.get("/api/backgrounds")
def list_backgrounds():
    return background_options()


# ------------------------------------------------------------
# Full merge: download (attachment) or open in a new tab (inline)
# ------------------------------------------------------------
@app.post("/api/merge")
async def merge_pdf(
    foreground_file: Optional[UploadFile] = File(default=None),
    foreground_url: str = Form(default=""),
    paper_size: str = Form(default="a2"),
    margin_color: str = Form(default="yellow"),
    paper_style: str = Form(default="squares"),
    include_watermark: bool = Form(default=True),
    disposition: Literal["attachment", "inline"] = Form(default="attachment"),
):
    url = _check_foreground_url(foreground_url)
    upload = await foreground_file.read() if foreground_file is not None else None

    req = MergeRequest(
        background_locator=_background_for(paper_size, margin_color, paper_style),
        foreground_locator=url,
        foreground_bytes=upload,
        page_limit=math.inf,
        include_watermark=include_watermark,
    )
    pdf = await _merge(req)

    name = source_name(foreground_file.filename if foreground_file is not None else None, url)
    return _pdf_response(pdf, download_filename(name), inline=(disposition == "inline"))


# ------------------------------------------------------------
# Preview: first page only; stale responses are dropped, not cancelled
# ------------------------------------------------------------
@app.post("/api/preview")
async def preview_pdf(
    foreground_file: Optional[UploadFile] = File(default=None),
    foreground_url: str = Form(default=""),
    paper_size: str = Form(default="a2"),
    margin_color: str = Form(default="yellow"),
    paper_style: str = Form(default="squares"),
    include_watermark: bool = Form(default=True),
    x_client_id: Optional[str] = Header(default=None),
):
    token = _previews.begin(x_client_id) if x_client_id else None

    url = _check_foreground_url(foreground_url)
    upload = await foreground_file.read() if foreground_file is not None else None

    req = MergeRequest(
        background_locator=_background_for(paper_size, margin_color, paper_style),
        foreground_locator=url,
        foreground_bytes=upload,
        page_limit=1,
        include_watermark=include_watermark,
    )
    pdf = await _merge(req)

    if token is not None and not _previews.is_current(token):
        logger.info("Dropping superseded preview for client %s (generation %d)", token.key, token.generation)
        raise HTTPException(status_code=409, detail="Superseded by a newer preview request")

    return _pdf_response(pdf, "preview.pdf", inline=True)


# ------------------------------------------------------------
# Native share bridge: the app hands over the shared file as base64
# ------------------------------------------------------------
class SharedPdfRequest(BaseModel):
    """Payload from the native share bridge."""

    filename: Optional[str] = None
    data_b64: str = ""
    paper_size: str = "a2"
    margin_color: str = "yellow"
    paper_style: str = "squares"
    include_watermark: bool = True


@app.post("/api/merge/shared")
async def merge_shared_pdf(body: SharedPdfRequest):
    data_b64 = body.data_b64.strip()
    try:
        data = base64.b64decode(data_b64, validate=True) if data_b64 else None
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"data_b64 is not valid base64: {e}")

    req = MergeRequest(
        background_locator=_background_for(body.paper_size, body.margin_color, body.paper_style),
        foreground_bytes=data,
        page_limit=math.inf,
        include_watermark=body.include_watermark,
    )
    pdf = await _merge(req)

    return _pdf_response(pdf, download_filename(body.filename), inline=False)
