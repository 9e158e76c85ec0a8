from __future__ import annotations

import pytest

from marginate.errors import UnavailableBackground
from marginate.services.filenames import (
    DEFAULT_DOWNLOAD_NAME,
    content_disposition,
    download_filename,
    source_name,
)
from marginate.services.request_tracker import LatestRequestTracker
from marginate.styling.backgrounds import background_locator, background_options, ensure_available


def test_background_locator_template():
    assert background_locator("a2", "yellow", "squares") == "./pdf-backgrounds/a2-yellow-squares.pdf"
    assert background_locator("a1", "yellow", "squares", base="/static/bg") == "/static/bg/a1-yellow-squares.pdf"


def test_background_locator_does_not_normalize():
    assert background_locator("A3", "Yellow", "Squares") == "./pdf-backgrounds/A3-Yellow-Squares.pdf"


@pytest.mark.parametrize("size", ["a1", "a2", "a3"])
def test_available_sizes(size):
    ensure_available(size, "yellow", "squares")


@pytest.mark.parametrize(
    "args,field",
    [
        (("a4", "yellow", "squares"), "paper_size"),
        (("a2", "white", "squares"), "margin_color"),
        (("a2", "dark", "squares"), "margin_color"),
        (("a2", "yellow", "cornell"), "paper_style"),
        (("a2", "yellow", "lines"), "paper_style"),
    ],
)
def test_reserved_or_unknown_tokens_are_unavailable(args, field):
    with pytest.raises(UnavailableBackground) as exc:
        ensure_available(*args)
    assert exc.value.field == field


def test_background_options_flags_reserved_tokens():
    opts = background_options()
    colors = {c["value"]: c["available"] for c in opts["margin_colors"]}
    styles = {s["value"]: s["available"] for s in opts["paper_styles"]}

    assert colors == {"yellow": True, "white": False, "dark": False}
    assert styles["squares"] is True and styles["cornell"] is False
    assert [s["value"] for s in opts["paper_sizes"]] == ["a1", "a2", "a3"]


def test_download_filename():
    assert download_filename("lecture 3.pdf") == "lecture 3-marginate.pdf"
    assert download_filename("notes.PDF") == "notes-marginate.pdf"
    assert download_filename("C:\\Users\\me\\paper.pdf") == "paper-marginate.pdf"
    assert download_filename("") == DEFAULT_DOWNLOAD_NAME
    assert download_filename(None) == DEFAULT_DOWNLOAD_NAME


def test_source_name_prefers_upload_then_url():
    assert source_name("upload.pdf", "https://x.com/y.pdf") == "upload.pdf"
    assert source_name(None, "https://x.com/docs/My%20Paper.pdf?dl=1") == "My Paper.pdf"
    assert source_name(None, "") == ""


def test_content_disposition():
    assert content_disposition("a b.pdf") == "attachment; filename*=UTF-8''a%20b.pdf"
    assert content_disposition("x", inline=True) == "inline; filename*=UTF-8''x.pdf"


def test_tracker_only_latest_generation_is_current():
    tracker = LatestRequestTracker()
    first = tracker.begin("client-1")
    second = tracker.begin("client-1")
    other = tracker.begin("client-2")

    assert not tracker.is_current(first)
    assert tracker.is_current(second)
    assert tracker.is_current(other)


def test_tracker_keeps_only_the_most_recent_clients():
    tracker = LatestRequestTracker(max_keys=2)
    tracker.begin("a")
    b = tracker.begin("b")
    a = tracker.begin("a")  # "a" is now the most recent
    c = tracker.begin("c")  # evicts "b"

    assert len(tracker) == 2
    assert tracker.is_current(a)
    assert tracker.is_current(c)
    assert not tracker.is_current(b)

    # a client coming back after eviction cannot revive its old request
    tracker.begin("b")
    assert not tracker.is_current(b)
