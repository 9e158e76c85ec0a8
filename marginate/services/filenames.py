# marginate/services/filenames.py
from __future__ import annotations

import re
from pathlib import PurePosixPath
from urllib.parse import quote, unquote, urlparse

DEFAULT_DOWNLOAD_NAME = "marginate-merged.pdf"


def _safe_filename(name: str) -> str:
    # Keep it simple for Content-Disposition; browsers are picky.
    name = (name or DEFAULT_DOWNLOAD_NAME).strip().replace("\n", " ").replace("\r", " ")
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name


def source_name(filename: str | None = None, locator: str | None = None) -> str:
    """Best display name for the foreground: upload filename, else last URL segment."""
    if filename and filename.strip():
        return filename.strip()
    if locator and locator.strip():
        path = unquote(urlparse(locator.strip()).path)
        return PurePosixPath(path).name
    return ""


def download_filename(source: str | None) -> str:
    """
    "lecture 3.pdf" -> "lecture 3-marginate.pdf"
    No usable source name -> "marginate-merged.pdf"
    """
    stem = PurePosixPath((source or "").replace("\\", "/")).name
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]
    stem = re.sub(r"[\x00-\x1f\"]", "", stem).strip()
    if not stem:
        return DEFAULT_DOWNLOAD_NAME
    return _safe_filename(f"{stem}-marginate")


def content_disposition(filename: str, inline: bool = False) -> str:
    """inline=True opens in the browser tab; inline=False forces download."""
    disp = "inline" if inline else "attachment"
    fname = _safe_filename(filename)
    # filename*= for utf-8 safety
    return f"{disp}; filename*=UTF-8''{quote(fname)}"
