# marginate/errors.py
from __future__ import annotations


class MarginateError(Exception):
    """Base class for every failure raised by the merge pipeline."""


# ------------------------------------------------------------
# Source acquisition
# ------------------------------------------------------------
class EmptyLocator(MarginateError):
    def __init__(self) -> None:
        super().__init__("URL is empty or undefined")


class FetchFailed(MarginateError):
    def __init__(self, locator: str, status: int | None = None, reason: str = ""):
        self.locator = locator
        self.status = status
        msg = f"Failed to fetch PDF from {locator}: {status if status is not None else 'no status'}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class EmptyResult(MarginateError):
    def __init__(self, locator: str):
        self.locator = locator
        super().__init__(f"Fetched PDF from {locator} is empty")


# ------------------------------------------------------------
# Composition
# ------------------------------------------------------------
class DecodeError(MarginateError):
    """
    The bytes for one side of the merge are not a readable PDF.
    The parser failure is chained as __cause__.
    """

    side = "document"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"Could not read the {self.side.upper()} PDF: {detail}")


class BackgroundDecodeError(DecodeError):
    side = "background"


class ForegroundDecodeError(DecodeError):
    side = "foreground"


class NoPages(MarginateError):
    def __init__(self) -> None:
        super().__init__("The BACKGROUND PDF has no pages")


# ------------------------------------------------------------
# Background templates
# ------------------------------------------------------------
class UnavailableBackground(MarginateError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field}={value!r} is not available")
