# scripts/merge_pdf.py
from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path

from marginate.config import get_settings
from marginate.errors import MarginateError
from marginate.services.filenames import download_filename, source_name
from marginate.services.merge_service import MergeRequest, create_merged_pdf
from marginate.storage.source_fetcher import get_fetcher
from marginate.styling.backgrounds import (
    MARGIN_COLORS,
    PAPER_SIZES,
    PAPER_STYLES,
    background_locator,
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Put a PDF on a margin template for note taking.")
    parser.add_argument("foreground", help="PDF path or http(s) URL")
    parser.add_argument("--background", default="", help="Explicit background PDF (overrides the template options)")
    parser.add_argument("--size", default="a2", choices=PAPER_SIZES)
    parser.add_argument("--color", default="yellow", choices=MARGIN_COLORS)
    parser.add_argument("--style", default="squares", choices=PAPER_STYLES)
    parser.add_argument("--pages", type=int, default=None, help="Only use the first N pages")
    parser.add_argument("--watermark", action="store_true", help="Add the Marginate watermark")
    parser.add_argument("--out", default="", help="Output path (default: <name>-marginate.pdf)")
    args = parser.parse_args()

    settings = get_settings()
    background = args.background or background_locator(args.size, args.color, args.style, base=settings.background_base)

    req = MergeRequest(
        background_locator=background,
        foreground_locator=args.foreground,
        page_limit=args.pages if args.pages is not None else math.inf,
        include_watermark=args.watermark,
    )

    print(f"[RUN] {args.foreground} on {background}")
    try:
        pdf = create_merged_pdf(req, fetcher=get_fetcher())
    except MarginateError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    out = Path(args.out or download_filename(source_name(None, args.foreground)))
    out.write_bytes(pdf)
    print(f"[OK] wrote {out} ({len(pdf)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
